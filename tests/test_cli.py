"""Tests for the didi command-line tool."""

import json

from typer.testing import CliRunner

from app.cli import EXIT_PARSE_ERROR, app
from tests.conftest import ISSUER_DID, NOW, claim_payload, make_jwt, request_payload

runner = CliRunner()


class TestDecodeCommand:

    def test_decode_literal(self):
        token = make_jwt(request_payload())
        result = runner.invoke(app, ["decode", token])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["header"]["alg"] == "ES256K-R"
        assert data["payload"]["type"] == "shareReq"

    def test_decode_stdin(self):
        token = make_jwt(request_payload())
        result = runner.invoke(app, ["decode", "-"], input=token + "\n")
        assert result.exit_code == 0
        assert json.loads(result.output)["payload"]["iss"] == ISSUER_DID

    def test_decode_garbage(self):
        result = runner.invoke(app, ["decode", "garbage"])
        assert result.exit_code == EXIT_PARSE_ERROR
        assert json.loads(result.output)["error"]["code"] == "JWT_DECODE_ERROR"


class TestParseCommand:

    def test_parse_file(self, tmp_path):
        token = make_jwt(claim_payload())
        path = tmp_path / "claim.jwt"
        path.write_text(token + "\n")

        result = runner.invoke(app, ["parse", str(path), "--now", str(NOW)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["envelope"]["kind"] == "CredentialDocument"
        assert data["envelope"]["jwt"] == token

    def test_parse_expired(self):
        token = make_jwt(request_payload())
        result = runner.invoke(app, ["parse", token, "--now", str(NOW + 10_000)])
        assert result.exit_code == EXIT_PARSE_ERROR
        error = json.loads(result.output)["error"]
        assert error["code"] == "AFTER_EXP"

    def test_parse_depth_limit(self):
        token = make_jwt(claim_payload(title="Leaf"))
        token = make_jwt(claim_payload(title="Outer", wrapped={"leaf": token}))
        result = runner.invoke(app, ["parse", token, "--now", str(NOW), "--max-depth", "0"])
        assert result.exit_code == EXIT_PARSE_ERROR
        assert json.loads(result.output)["error"]["code"] == "RESOLUTION_DEPTH_EXCEEDED"

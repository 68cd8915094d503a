"""Tests for the HTTP API."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from tests.conftest import (
    HOLDER_DID,
    ISSUER_DID,
    FakeDelegate,
    claim_payload,
    make_jwt,
    request_payload,
    response_payload,
)

FAR_FUTURE = 4_000_000_000


def live(payload: dict) -> dict:
    """Make a payload valid at the real current time."""
    payload.update(iat=0, exp=FAR_FUTURE)
    return payload


@pytest.fixture
def client():
    from app.main import app, set_verification_delegate

    set_verification_delegate(None)
    yield TestClient(app)
    set_verification_delegate(None)


# =============================================================================
# Operational endpoints
# =============================================================================

class TestOperational:

    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"ok": True}

    def test_version(self, client):
        assert "git_sha" in client.get("/version").json()

    def test_admin_categories(self, client):
        data = client.get("/admin").json()
        assert data["normative"]["did_method"] == "ethr"
        assert data["configurable"]["max_resolution_depth"] == 16
        assert "ethr_rpc_url" in data["operational"]
        assert "log_level_name" in data["environment"]

    def test_admin_disabled(self, client):
        with patch("app.core.config.ADMIN_ENDPOINT_ENABLED", False):
            response = client.get("/admin")
        assert response.status_code == 404

    def test_log_level(self, client):
        response = client.post("/admin/log-level", json={"level": "debug"})
        assert response.json()["log_level"] == "DEBUG"
        client.post("/admin/log-level", json={"level": "INFO"})

    def test_invalid_log_level(self, client):
        assert client.post("/admin/log-level", json={"level": "LOUD"}).status_code == 400


# =============================================================================
# /parse
# =============================================================================

class TestParseEndpoint:

    def test_unverified_request(self, client):
        token = make_jwt(live(request_payload()))
        response = client.post("/parse", json={"jwt": token})
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["envelope"]["kind"] == "SelectiveDisclosureRequest"
        assert data["envelope"]["issuer"] == ISSUER_DID
        assert data["envelope"]["jwt"] == token
        assert "error" not in data

    def test_unverified_claim_with_nested(self, client):
        inner = make_jwt(live(claim_payload(title="Phone", data={"phoneNumber": "+54911"})))
        outer = make_jwt(live(claim_payload(title="Identidad", data={}, wrapped={"phone": inner})))
        envelope = client.post("/parse", json={"jwt": outer}).json()["envelope"]
        assert envelope["kind"] == "CredentialDocument"
        assert envelope["nested"][0]["kind"] == "CredentialDocument"
        assert envelope["nested"][0]["special_flag"] == {"kind": "PhoneNumber", "value": "+54911"}

    def test_parse_failure_is_200(self, client):
        response = client.post("/parse", json={"jwt": "garbage"})
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is False
        assert data["error"]["code"] == "JWT_DECODE_ERROR"
        assert data["error"]["recoverable"] is False

    def test_expired(self, client):
        token = make_jwt(request_payload(exp=1))
        assert client.post("/parse", json={"jwt": token}).json()["error"]["code"] == "AFTER_EXP"

    def test_verify_without_delegate(self, client):
        token = make_jwt(live(request_payload()))
        response = client.post("/parse", json={"jwt": token, "verify": True})
        assert response.status_code == 503

    def test_verify_with_delegate(self, client):
        from app.main import set_verification_delegate

        delegate = FakeDelegate()
        set_verification_delegate(delegate)
        token = make_jwt(live(request_payload()))

        response = client.post("/parse", json={"jwt": token, "verify": True, "audience": HOLDER_DID})
        assert response.json()["ok"] is True
        assert delegate.envelope_calls == [(token, HOLDER_DID)]

    def test_verification_failure_recoverable(self, client):
        from app.main import set_verification_delegate

        token = make_jwt(live(request_payload()))
        set_verification_delegate(FakeDelegate(reject=[token]))

        error = client.post("/parse", json={"jwt": token, "verify": True}).json()["error"]
        assert error["code"] == "VERIFICATION_ERROR"
        assert error["recoverable"] is True

    def test_unverified_parse_is_logged(self, client):
        token = make_jwt(live(request_payload()))
        with patch("app.main.log") as mock_log:
            client.post("/parse", json={"jwt": token})

        calls = [c for c in mock_log.info.call_args_list if c.args[0] == "parse_called"]
        assert len(calls) == 1
        extra = calls[0].kwargs["extra"]
        assert extra["verified"] is False
        assert extra["token_kind"] == "SelectiveDisclosureRequest"
        assert extra["error_code"] is None

    def test_verified_parse_failure_is_logged(self, client):
        from app.main import set_verification_delegate

        token = make_jwt(live(request_payload()))
        set_verification_delegate(FakeDelegate(reject=[token]))
        with patch("app.main.log") as mock_log:
            client.post("/parse", json={"jwt": token, "verify": True})

        calls = [c for c in mock_log.info.call_args_list if c.args[0] == "parse_called"]
        assert len(calls) == 1
        extra = calls[0].kwargs["extra"]
        assert extra["verified"] is True
        assert extra["token_kind"] is None
        assert extra["error_code"] == "VERIFICATION_ERROR"

    def test_bad_audience(self, client):
        from app.main import set_verification_delegate

        set_verification_delegate(FakeDelegate())
        token = make_jwt(live(request_payload()))
        data = client.post("/parse", json={"jwt": token, "verify": True, "audience": "did:web:x"}).json()
        assert data["error"]["code"] == "BAD_METHOD"

    def test_missing_jwt(self, client):
        assert client.post("/parse", json={}).status_code == 422


# =============================================================================
# /disclosure/claims
# =============================================================================

class TestDisclosureClaimsEndpoint:

    def test_selects_claims(self, client):
        request_jwt = make_jwt(live(request_payload(claims={
            "user_info": {"nombre": {"essential": True}, "dni": {"essential": True}},
            "verifiable": {"Email": {"essential": True}, "Phone": {"essential": True}},
        })))
        email = make_jwt(live(claim_payload()))

        response = client.post("/disclosure/claims", json={
            "request_jwt": request_jwt,
            "own_did": HOLDER_DID,
            "documents": [email],
            "identity": {"personal_data": {"first_names": "Ana"}},
        })
        data = response.json()
        assert data["ok"] is True
        assert data["own_claims"] == {"nombre": "Ana"}
        assert data["verified_claims"] == [email]
        assert data["missing_required"] == ["dni", "Phone"]

    def test_request_must_be_a_request(self, client):
        data = client.post("/disclosure/claims", json={
            "request_jwt": make_jwt(live(response_payload())),
            "own_did": HOLDER_DID,
        }).json()
        assert data["ok"] is False
        assert data["error"]["code"] == "SHAPE_DECODE_ERROR"

    def test_documents_must_be_credentials(self, client):
        request_jwt = make_jwt(live(request_payload()))
        data = client.post("/disclosure/claims", json={
            "request_jwt": request_jwt,
            "own_did": HOLDER_DID,
            "documents": [request_jwt],
        }).json()
        assert data["error"]["code"] == "SHAPE_DECODE_ERROR"

    def test_bad_own_did(self, client):
        data = client.post("/disclosure/claims", json={
            "request_jwt": make_jwt(live(request_payload())),
            "own_did": "0x123",
        }).json()
        assert data["error"]["code"] == "MALFORMED_ADDRESS"

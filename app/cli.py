"""DIDI token command-line tool.

Commands:
    didi decode <token>   Show the raw JWT header and payload
    didi parse <token>    Parse a token into its envelope (no signature checks)
"""

import json
import os
import sys
from typing import Any, Optional

import typer

from app.didi.api_models import to_error_detail
from app.didi.envelope import decode_token, envelope_to_dict
from app.didi.exceptions import DisclosureError
from app.didi.parse import unverified_parse_jwt

EXIT_PARSE_ERROR = 2

app = typer.Typer(
    name="didi",
    help="Decode and parse DIDI selective-disclosure tokens.",
    no_args_is_help=True,
)


def read_input(source: str) -> str:
    """Read a token from a literal, a file path, or '-' for stdin."""
    if source == "-":
        return sys.stdin.read().strip()
    if os.path.isfile(source):
        with open(source, encoding="utf-8") as f:
            return f.read().strip()
    return source.strip()


def output(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def output_error(error: DisclosureError) -> None:
    """Print the error as JSON and exit with EXIT_PARSE_ERROR."""
    output({"ok": False, "error": to_error_detail(error).model_dump()})
    raise typer.Exit(code=EXIT_PARSE_ERROR)


@app.command("decode")
def decode_cmd(
    source: str = typer.Argument(
        ...,
        help="JWT token, file path, or '-' for stdin",
    ),
) -> None:
    """Decode a token's header and payload without validating anything.

    Examples:
        didi decode "eyJhbGciOiJFUzI1NkstUiJ9..."
        cat token.jwt | didi decode -
    """
    try:
        header, payload = decode_token(read_input(source))
    except DisclosureError as e:
        output_error(e)
        return  # unreachable, but helps type checker

    output({"header": header, "payload": payload})


@app.command("parse")
def parse_cmd(
    source: str = typer.Argument(
        ...,
        help="JWT token, file path, or '-' for stdin",
    ),
    now: Optional[int] = typer.Option(
        None,
        "--now",
        help="Override current time (Unix timestamp) for testing",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        help="Forwarding/nesting depth limit",
    ),
) -> None:
    """Parse a token into its envelope, resolving forwardings and nested
    credentials. Signatures are not checked.

    Examples:
        didi parse request.jwt
        didi parse --now 1700000000 "eyJ..."
    """
    result = unverified_parse_jwt(read_input(source), now=now, max_depth=max_depth)
    if not result.ok:
        output_error(result.error)
        return

    output({"ok": True, "envelope": envelope_to_dict(result.value)})


if __name__ == "__main__":
    app()

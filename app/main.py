import logging
import os
import time
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.logging_config import configure_logging
from app.didi.api_models import (
    DisclosureClaimsRequest,
    DisclosureClaimsResponse,
    IdentityModel,
    ParseRequest,
    ParseResponse,
    to_error_detail,
)
from app.didi.delegate import VerificationDelegate
from app.didi.disclosure import Address, Identity, PersonalData, get_response_claims
from app.didi.envelope import CredentialDocument, SelectiveDisclosureRequest, envelope_to_dict
from app.didi.exceptions import DisclosureError, ShapeDecodeError
from app.didi.identifier import EthrDID
from app.didi.parse import ParseResult, parse_jwt, unverified_parse_jwt

configure_logging()
log = logging.getLogger("didi")

app = FastAPI(title="DIDI Disclosure Service", version="0.1.0")

# Installed by the embedding deployment; verified parsing is unavailable without it
app.state.verification_delegate = None


def set_verification_delegate(delegate: Optional[VerificationDelegate]) -> None:
    """Install the delegate used by /parse when verify=true."""
    app.state.verification_delegate = delegate


@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.middleware("http")
async def req_log(request: Request, call_next):
    start = time.time()
    route = request.url.path
    remote = request.client.host if request.client else "-"
    resp = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    log.info(f"request_complete status={resp.status_code} duration_ms={duration_ms}",
             extra={"request_id":"-", "route":route, "remote_addr":remote})
    return resp


@app.get("/version")
def version():
    # GIT_SHA is injected at deploy time
    return {"git_sha": os.getenv("GIT_SHA", "unknown")}


@app.get("/admin")
def admin():
    """Return all configurable items for operator visibility.

    Gated by ADMIN_ENDPOINT_ENABLED (default: True for dev, False for prod).
    """
    from app.core.config import (
        ADMIN_ENDPOINT_ENABLED,
        DID_METHOD,
        ETHR_RPC_URL,
        MAX_RESOLUTION_DEPTH,
        SUBMIT_CONTENT_TYPE,
        SUBMIT_TIMEOUT_SECONDS,
        VC_CONTEXT,
        VC_TYPE,
    )

    if not ADMIN_ENDPOINT_ENABLED:
        return JSONResponse(
            status_code=404,
            content={"detail": "Admin endpoint disabled"}
        )

    return {
        "normative": {
            "did_method": DID_METHOD,
            "vc_context": VC_CONTEXT,
            "vc_type": VC_TYPE,
            "submit_content_type": SUBMIT_CONTENT_TYPE,
        },
        "configurable": {
            "max_resolution_depth": MAX_RESOLUTION_DEPTH,
            "submit_timeout_seconds": SUBMIT_TIMEOUT_SECONDS,
        },
        "operational": {
            "ethr_rpc_url": ETHR_RPC_URL,
            "admin_endpoint_enabled": ADMIN_ENDPOINT_ENABLED,
            "verification_delegate": type(app.state.verification_delegate).__name__
            if app.state.verification_delegate is not None else None,
        },
        "environment": {
            "log_level": logging.getLogger().getEffectiveLevel(),
            "log_level_name": logging.getLevelName(logging.getLogger().getEffectiveLevel()),
        },
    }


class LogLevelRequest(BaseModel):
    level: str


@app.post("/admin/log-level")
def set_log_level(req: LogLevelRequest):
    """Change log level at runtime (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Gated by ADMIN_ENDPOINT_ENABLED.
    """
    from app.core.config import ADMIN_ENDPOINT_ENABLED

    if not ADMIN_ENDPOINT_ENABLED:
        return JSONResponse(
            status_code=404,
            content={"detail": "Admin endpoint disabled"}
        )

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = req.level.upper()

    if level_upper not in valid_levels:
        return JSONResponse(
            status_code=400,
            content={"detail": f"Invalid log level. Must be one of: {valid_levels}"}
        )

    logging.getLogger().setLevel(getattr(logging, level_upper))
    logging.getLogger("didi").setLevel(getattr(logging, level_upper))

    log.info(f"Log level changed to {level_upper}")

    return {
        "success": True,
        "log_level": level_upper,
        "message": f"Log level set to {level_upper}"
    }


# =============================================================================
# Parsing
# =============================================================================


def _parse_response(result: ParseResult) -> ParseResponse:
    if result.ok:
        return ParseResponse(ok=True, envelope=envelope_to_dict(result.value))
    return ParseResponse(ok=False, error=to_error_detail(result.error))


def _log_parse(request: Request, result: ParseResult, verified: bool) -> None:
    log.info("parse_called", extra={
        "request_id": "-",
        "route": "/parse",
        "remote_addr": request.client.host if request.client else "-",
        "verified": verified,
        "token_kind": type(result.value).__name__ if result.ok else None,
        "error_code": None if result.ok else result.error.code,
    })


@app.post("/parse")
async def parse(req: ParseRequest, request: Request):
    """Parse a DIDI token, optionally verifying every signature in it.

    Parse failures are reported in the body with HTTP 200; only a missing
    verification delegate is an HTTP error.
    """
    from app.core.config import ETHR_RPC_URL

    if not req.verify:
        result = unverified_parse_jwt(req.jwt)
        _log_parse(request, result, verified=False)
        return JSONResponse(_parse_response(result).model_dump(exclude_none=True))

    delegate = app.state.verification_delegate
    if delegate is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Verification delegate not configured"}
        )

    audience = None
    if req.audience:
        try:
            audience = EthrDID.parse(req.audience)
        except DisclosureError as e:
            resp = ParseResponse(ok=False, error=to_error_detail(e))
            return JSONResponse(resp.model_dump(exclude_none=True))

    result = await parse_jwt(req.jwt, ETHR_RPC_URL, delegate, audience=audience)
    _log_parse(request, result, verified=True)
    return JSONResponse(_parse_response(result).model_dump(exclude_none=True))


# =============================================================================
# Disclosure
# =============================================================================


def _to_identity(model: IdentityModel) -> Identity:
    return Identity(
        personal_data=PersonalData(**model.personal_data.model_dump()),
        email=model.email,
        cell_phone=model.cell_phone,
        address=Address(**model.address.model_dump()),
    )


def _expect(result: ParseResult, kind: type, what: str) -> Any:
    """Unwrap a parse result that must be of a given envelope kind."""
    value = result.unwrap()
    if not isinstance(value, kind):
        raise ShapeDecodeError(f"{what} must be a {kind.__name__}, got {type(value).__name__}")
    return value


@app.post("/disclosure/claims")
def disclosure_claims(req: DisclosureClaimsRequest):
    """Select the claims a holder can disclose in answer to a request.

    The request and the holder's documents are parsed without signature
    verification; they come from the holder's own storage.
    """
    try:
        own_did = EthrDID.parse(req.own_did)
        request = _expect(unverified_parse_jwt(req.request_jwt), SelectiveDisclosureRequest, "request_jwt")
        documents: List[CredentialDocument] = [
            _expect(unverified_parse_jwt(token), CredentialDocument, "documents entry")
            for token in req.documents
        ]
    except DisclosureError as e:
        resp = DisclosureClaimsResponse(ok=False, error=to_error_detail(e))
        return JSONResponse(resp.model_dump(exclude_none=True))

    claims = get_response_claims(own_did, request, documents, _to_identity(req.identity))
    resp = DisclosureClaimsResponse(
        ok=True,
        own_claims=claims.own_claims,
        verified_claims=[doc.jwt for doc in claims.verified_claims],
        missing_required=claims.missing_required,
    )
    return JSONResponse(resp.model_dump(exclude_none=True))

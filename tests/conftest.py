"""Shared helpers and fixtures for the DIDI test suite."""

import base64
import json
from typing import Any, Dict, Iterable, List, Optional

import pytest

from app.didi.delegate import VerificationDelegate
from app.didi.envelope.token import decode_token_payload


# =============================================================================
# Identifiers and times
# =============================================================================

ISSUER_ADDRESS = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"
HOLDER_ADDRESS = "0x2b5ad5c4795c026514f8317c7a215e218dccd6cf"
OTHER_ADDRESS = "0x6813eb9362372eef6200f3b1dbc3f819671cba69"

ISSUER_DID = f"did:ethr:{ISSUER_ADDRESS}"
HOLDER_DID = f"did:ethr:{HOLDER_ADDRESS}"
OTHER_DID = f"did:ethr:{OTHER_ADDRESS}"

NOW = 1_700_000_000
ETHR_URI = "http://localhost:8545"


# =============================================================================
# Token builders
# =============================================================================

def b64url_encode(data: Any) -> str:
    """Base64url encode a value as JSON."""
    json_bytes = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(json_bytes).rstrip(b"=").decode("ascii")


def make_jwt(payload: Any, header: Optional[dict] = None, signature: str = "c2lnbmF0dXJl") -> str:
    """Create an (unsigned) JWT string from a payload."""
    if header is None:
        header = {"typ": "JWT", "alg": "ES256K-R"}
    return f"{b64url_encode(header)}.{b64url_encode(payload)}.{signature}"


def request_payload(**overrides) -> dict:
    payload = {
        "type": "shareReq",
        "iss": ISSUER_DID,
        "iat": NOW - 60,
        "exp": NOW + 3600,
        "callback": "https://issuer.example.com/callback",
        "claims": {
            "user_info": {"nombre": {"essential": True}},
            "verifiable": {"Email": {"essential": True}},
        },
    }
    payload.update(overrides)
    return payload


def response_payload(request_token: str = "req.token.sig", **overrides) -> dict:
    payload = {
        "type": "shareResp",
        "iss": HOLDER_DID,
        "sub": ISSUER_DID,
        "req": request_token,
        "own": {"nombre": "Ana"},
        "verified": [],
        "iat": NOW - 60,
        "exp": NOW + 3600,
    }
    payload.update(overrides)
    return payload


def claim_payload(
    title: str = "Email",
    data: Optional[Dict[str, str]] = None,
    wrapped: Optional[Dict[str, str]] = None,
    iss: str = ISSUER_DID,
    sub: str = HOLDER_DID,
    **overrides,
) -> dict:
    subject: Dict[str, Any] = {"data": data if data is not None else {"email": "ana@example.com"}}
    if wrapped is not None:
        subject["wrapped"] = wrapped
    payload = {
        "iss": iss,
        "sub": sub,
        "iat": NOW - 60,
        "exp": NOW + 3600,
        "vc": {
            "@context": ["https://www.w3.org/2018/credentials/v1"],
            "type": ["VerifiableCredential"],
            "credentialSubject": {title: subject},
        },
    }
    payload.update(overrides)
    return payload


def forwarded_payload(token: str, **overrides) -> dict:
    payload = {"forwarded": token, "iss": OTHER_DID, "iat": NOW - 60, "exp": NOW + 3600}
    payload.update(overrides)
    return payload


# =============================================================================
# Verification delegate double
# =============================================================================

class FakeDelegate(VerificationDelegate):
    """Accepts every token and returns its decoded payload.

    Args:
        reject: Tokens whose verification raises.
        resolver_error: Exception raised from create_resolver().
        payloads: Per-token payload returned instead of the decoded one.
    """

    def __init__(
        self,
        reject: Iterable[str] = (),
        resolver_error: Optional[Exception] = None,
        payloads: Optional[Dict[str, dict]] = None,
    ):
        self.reject = set(reject)
        self.resolver_error = resolver_error
        self.payloads = payloads or {}
        self.resolver_endpoints: List[str] = []
        self.envelope_calls: List[tuple] = []
        self.credential_calls: List[str] = []

    def create_resolver(self, endpoint: str) -> Any:
        self.resolver_endpoints.append(endpoint)
        if self.resolver_error is not None:
            raise self.resolver_error
        return {"endpoint": endpoint}

    def _verify(self, token: str) -> dict:
        if token in self.reject:
            raise ValueError(f"invalid signature on {token[:12]}")
        if token in self.payloads:
            return self.payloads[token]
        return decode_token_payload(token)

    async def verify_envelope(self, token: str, resolver: Any, audience: Optional[str]) -> dict:
        self.envelope_calls.append((token, audience))
        return self._verify(token)

    async def verify_credential(self, token: str, resolver: Any) -> dict:
        self.credential_calls.append(token)
        return self._verify(token)


@pytest.fixture
def delegate() -> FakeDelegate:
    return FakeDelegate()

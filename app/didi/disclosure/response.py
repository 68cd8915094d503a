"""
Disclosure response signing and REST submission.

Signing is delegated to a ResponseSigner (key management lives outside this
package). Submission is a single POST to the request's callback; the HTTP
outcome is returned to the caller uninterpreted.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import httpx

from app.core.config import SUBMIT_CONTENT_TYPE, SUBMIT_TIMEOUT_SECONDS
from app.didi.envelope.models import CredentialDocument, SelectiveDisclosureRequest

log = logging.getLogger(__name__)


class ResponseSigner(ABC):
    """Signs disclosure response payloads with the holder's key."""

    @abstractmethod
    async def create_disclosure_response(self, claims: Dict[str, Any]) -> str:
        """Sign `claims` as a shareResp token and return the compact JWT."""
        ...


def build_response_payload(
    request: SelectiveDisclosureRequest,
    own_claims: Dict[str, str],
    verified_claims: Sequence[CredentialDocument],
) -> Dict[str, Any]:
    """Payload handed to the signer for a response to `request`."""
    return {
        "sub": request.issuer.did(),
        "req": request.jwt,
        "own": dict(own_claims),
        "verified": [document.jwt for document in verified_claims],
    }


async def sign_response(
    signer: ResponseSigner,
    request: SelectiveDisclosureRequest,
    own_claims: Dict[str, str],
    verified_claims: Sequence[CredentialDocument],
) -> str:
    """Create a signed SelectiveDisclosureResponse token."""
    payload = build_response_payload(request, own_claims, verified_claims)
    return await signer.create_disclosure_response(payload)


async def submit_response(
    callback: str,
    token: str,
    timeout: Optional[float] = None,
) -> httpx.Response:
    """POST a signed response token to the requester's callback.

    One attempt, no retry. httpx errors propagate to the caller.

    Args:
        callback: URL taken from the request's callback field.
        token: Signed response JWT.
        timeout: Client timeout in seconds (defaults to SUBMIT_TIMEOUT_SECONDS).
    """
    if timeout is None:
        timeout = SUBMIT_TIMEOUT_SECONDS

    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.post(
            callback,
            content=json.dumps({"access_token": token}),
            headers={"Content-Type": SUBMIT_CONTENT_TYPE},
        )

    log.info(f"Submitted disclosure response to {callback}: HTTP {response.status_code}")
    return response

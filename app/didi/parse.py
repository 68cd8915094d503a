"""
Envelope parse pipeline.

Turns a compact JWT into a typed envelope: token decode, envelope codec,
temporal gate, then dispatch on the envelope kind. Forwardings are replaced by
whatever their forwarded token parses to; claims have every wrapped token
resolved into nested CredentialDocuments.

Two entry points:
- unverified_parse_jwt(): shape and time checks only, no signatures.
- parse_jwt(): runs the unverified path first, then has the verification
  delegate check every token in the tree.

Inside the pipeline each step raises a DisclosureError; the entry points
catch it and return a ParseResult. The first failure aborts the whole parse.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from app.core.config import MAX_RESOLUTION_DEPTH
from app.didi.delegate import VerificationDelegate
from app.didi.envelope.codec import decode_payload
from app.didi.envelope.models import (
    CredentialDocument,
    ForwardedRequest,
    Number,
    ParsedEnvelope,
    SelectiveDisclosureProposal,
    SelectiveDisclosureRequest,
    SelectiveDisclosureResponse,
    VerifiedClaim,
)
from app.didi.envelope.special import extract_special_flag
from app.didi.envelope.token import decode_token_payload
from app.didi.exceptions import (
    DisclosureError,
    NonCredentialWrapError,
    ResolutionDepthExceededError,
    ResolverCreationError,
    VerificationError,
)
from app.didi.identifier import EthrDID
from app.didi.temporal import check_temporal, current_time

log = logging.getLogger(__name__)

# Kinds returned as-is with their jwt attached
_SPEC_ENVELOPES = (SelectiveDisclosureRequest, SelectiveDisclosureResponse, SelectiveDisclosureProposal)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of a parse: exactly one of value/error is set."""
    value: Optional[ParsedEnvelope] = None
    error: Optional[DisclosureError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ParsedEnvelope:
        """Return the parsed envelope, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value


# =============================================================================
# Unverified path
# =============================================================================


def unverified_parse_jwt(
    jwt: str,
    now: Optional[Number] = None,
    max_depth: Optional[int] = None,
) -> ParseResult:
    """Parse a token without checking any signature.

    Args:
        jwt: Compact JWT.
        now: Evaluation time in epoch seconds (defaults to the current time).
        max_depth: Forwarding/nesting limit (defaults to MAX_RESOLUTION_DEPTH).

    Returns:
        ParseResult holding the envelope or the first DisclosureError raised.
    """
    if now is None:
        now = current_time()
    if max_depth is None:
        max_depth = MAX_RESOLUTION_DEPTH

    try:
        return ParseResult(value=_parse_unverified(jwt, now, 0, max_depth))
    except DisclosureError as e:
        log.info(f"Unverified parse failed: {e.message}", extra={"error_code": e.code})
        return ParseResult(error=e)


def _parse_unverified(jwt: str, now: Number, depth: int, max_depth: int) -> ParsedEnvelope:
    if depth > max_depth:
        raise ResolutionDepthExceededError(max_depth)

    payload = decode_token_payload(jwt)
    envelope = decode_payload(payload)
    check_temporal(envelope.issued_at, envelope.expire_at, now)

    if isinstance(envelope, _SPEC_ENVELOPES):
        return dataclasses.replace(envelope, jwt=jwt)

    if isinstance(envelope, ForwardedRequest):
        return _parse_unverified(envelope.forwarded, now, depth + 1, max_depth)

    children = [
        _parse_unverified(token, now, depth + 1, max_depth)
        for token in envelope.wrapped.values()
    ]
    return _to_document(envelope, jwt, _require_credentials(children))


# =============================================================================
# Verified path
# =============================================================================


async def parse_jwt(
    jwt: str,
    ethr_uri: str,
    delegate: VerificationDelegate,
    audience: Optional[EthrDID] = None,
    now: Optional[Number] = None,
    max_depth: Optional[int] = None,
) -> ParseResult:
    """Parse a token and verify it and every token nested in it.

    Args:
        jwt: Compact JWT.
        ethr_uri: JSON-RPC endpoint for the delegate's DID resolver.
        delegate: Signature verification backend.
        audience: Required audience for envelopes (not applied to the
            credentials nested in a claim).
        now: Evaluation time in epoch seconds (defaults to the current time).
        max_depth: Forwarding/nesting limit (defaults to MAX_RESOLUTION_DEPTH).

    Returns:
        ParseResult holding the verified envelope or the first failure.
    """
    if now is None:
        now = current_time()
    if max_depth is None:
        max_depth = MAX_RESOLUTION_DEPTH

    try:
        value = await _parse_verified(jwt, ethr_uri, delegate, audience, now, 0, max_depth)
        return ParseResult(value=value)
    except DisclosureError as e:
        log.info(f"Verified parse failed: {e.message}", extra={"error_code": e.code})
        return ParseResult(error=e)


async def _parse_verified(
    jwt: str,
    ethr_uri: str,
    delegate: VerificationDelegate,
    audience: Optional[EthrDID],
    now: Number,
    depth: int,
    max_depth: int,
) -> ParsedEnvelope:
    unverified = _parse_unverified(jwt, now, depth, max_depth)

    try:
        resolver = delegate.create_resolver(ethr_uri)
    except Exception as e:
        log.warning(f"Resolver creation failed for {ethr_uri}: {e}")
        raise ResolverCreationError(e)

    try:
        if isinstance(unverified, CredentialDocument):
            payload = await delegate.verify_credential(jwt, resolver)
        else:
            payload = await delegate.verify_envelope(
                jwt, resolver, audience.did() if audience is not None else None
            )
    except Exception as e:
        log.warning(f"Token verification failed: {e}")
        raise VerificationError(e)

    envelope = decode_payload(payload)

    if isinstance(envelope, _SPEC_ENVELOPES):
        return dataclasses.replace(envelope, jwt=jwt)

    if isinstance(envelope, ForwardedRequest):
        return await _parse_verified(
            envelope.forwarded, ethr_uri, delegate, audience, now, depth + 1, max_depth
        )

    # Siblings verify concurrently; the first failure in wrapped order wins
    results = await asyncio.gather(
        *[
            _parse_verified(token, ethr_uri, delegate, None, now, depth + 1, max_depth)
            for token in envelope.wrapped.values()
        ],
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return _to_document(envelope, jwt, _require_credentials(results))


# =============================================================================
# Helpers
# =============================================================================


def _require_credentials(children: Sequence[Any]) -> List[CredentialDocument]:
    """Every token wrapped by a claim must itself be a claim."""
    for child in children:
        if not isinstance(child, CredentialDocument):
            raise NonCredentialWrapError(
                f"Credential wraps a {type(child).__name__}, expected a credential"
            )
    return list(children)


def _to_document(claim: VerifiedClaim, jwt: str, nested: List[CredentialDocument]) -> CredentialDocument:
    return CredentialDocument(
        issuer=claim.issuer,
        subject=claim.subject,
        title=claim.title,
        jwt=jwt,
        data=claim.data,
        category=claim.category,
        preview=claim.preview,
        issued_at=claim.issued_at,
        expire_at=claim.expire_at,
        nested=nested,
        special_flag=extract_special_flag(claim.title, claim.data),
    )

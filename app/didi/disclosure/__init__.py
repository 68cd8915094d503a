"""Selective disclosure: choosing, signing and submitting response claims."""

from app.didi.disclosure.identity import Address, Identity, PersonalData
from app.didi.disclosure.response import (
    ResponseSigner,
    build_response_payload,
    sign_response,
    submit_response,
)
from app.didi.disclosure.selector import (
    OWN_CLAIM_ACCESSORS,
    ResponseClaims,
    get_response_claims,
    select_own_claims,
    select_verified_claims,
)

__all__ = [
    # Identity
    "Address",
    "Identity",
    "PersonalData",
    # Selection
    "OWN_CLAIM_ACCESSORS",
    "ResponseClaims",
    "get_response_claims",
    "select_own_claims",
    "select_verified_claims",
    # Response
    "ResponseSigner",
    "build_response_payload",
    "sign_response",
    "submit_response",
]

"""Envelope types, wire codec and token decoding."""

from app.didi.envelope.codec import decode_payload, encode_envelope, envelope_to_dict
from app.didi.envelope.models import (
    CredentialCategory,
    CredentialDocument,
    Envelope,
    ForwardedRequest,
    IssuerSelector,
    ParsedEnvelope,
    Preview,
    SelectiveDisclosureProposal,
    SelectiveDisclosureRequest,
    SelectiveDisclosureResponse,
    SpecialCredentialFlag,
    SpecialCredentialKind,
    UserInfoSpec,
    VerifiableSpec,
    VerifiedClaim,
)
from app.didi.envelope.special import extract_special_flag
from app.didi.envelope.token import decode_token, decode_token_payload

__all__ = [
    # Codec
    "decode_payload",
    "encode_envelope",
    "envelope_to_dict",
    "decode_token",
    "decode_token_payload",
    "extract_special_flag",
    # Models
    "CredentialCategory",
    "CredentialDocument",
    "Envelope",
    "ForwardedRequest",
    "IssuerSelector",
    "ParsedEnvelope",
    "Preview",
    "SelectiveDisclosureProposal",
    "SelectiveDisclosureRequest",
    "SelectiveDisclosureResponse",
    "SpecialCredentialFlag",
    "SpecialCredentialKind",
    "UserInfoSpec",
    "VerifiableSpec",
    "VerifiedClaim",
]

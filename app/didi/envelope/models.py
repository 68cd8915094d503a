"""Envelope domain models.

One frozen dataclass per envelope kind. SelectiveDisclosureRequest,
SelectiveDisclosureResponse, SelectiveDisclosureProposal and
CredentialDocument are what callers receive from the parse pipeline.
VerifiedClaim and ForwardedRequest only exist between the codec and the
pipeline: the former still carries its wrapped tokens, the latter is
replaced by whatever its forwarded token parses to.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from app.didi.identifier import EthrDID

Number = Union[int, float]


class CredentialCategory(str, Enum):
    """Semantic category of a credential."""
    EDUCATION = "education"
    LIVING_PLACE = "livingPlace"
    FINANCE = "finance"
    IDENTITY = "identity"


class SpecialCredentialKind(str, Enum):
    """Credentials that downstream consumers treat specially."""
    PHONE_NUMBER = "PhoneNumber"
    EMAIL = "Email"


@dataclass(frozen=True)
class SpecialCredentialFlag:
    kind: SpecialCredentialKind
    value: str


@dataclass(frozen=True)
class Preview:
    """Display hint: preview layout kind and the data fields it shows."""
    kind: Number
    fields: List[str] = field(default_factory=list)


# =============================================================================
# Request-side claim specifications
# =============================================================================

@dataclass(frozen=True)
class UserInfoSpec:
    essential: Optional[bool] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class IssuerSelector:
    did: EthrDID
    url: Optional[str] = None


@dataclass(frozen=True)
class VerifiableSpec:
    essential: Optional[bool] = None
    iss: Optional[List[IssuerSelector]] = None
    jwt: Optional[str] = None
    reason: Optional[str] = None


# =============================================================================
# Envelopes
# =============================================================================

@dataclass(frozen=True)
class SelectiveDisclosureRequest:
    """Request for own claims and verified claims."""
    issuer: EthrDID
    own_claims: Dict[str, UserInfoSpec] = field(default_factory=dict)
    verified_claims: Dict[str, VerifiableSpec] = field(default_factory=dict)
    issued_at: Optional[Number] = None
    expire_at: Optional[Number] = None
    callback: Optional[str] = None
    jwt: Optional[str] = None


@dataclass(frozen=True)
class SelectiveDisclosureProposal:
    """Same specification shape as a request, under its own discriminator."""
    issuer: EthrDID
    own_claims: Dict[str, UserInfoSpec] = field(default_factory=dict)
    verified_claims: Dict[str, VerifiableSpec] = field(default_factory=dict)
    issued_at: Optional[Number] = None
    expire_at: Optional[Number] = None
    callback: Optional[str] = None
    jwt: Optional[str] = None


@dataclass(frozen=True)
class SelectiveDisclosureResponse:
    """Answer to a request.

    Attributes:
        issuer: The responding holder.
        subject: Recipient of the response (the requester).
        request_token: JWT of the request being answered.
        own_claims: Disclosed key/value pairs (not independently signed).
        verified_claims: Disclosed credential JWTs.
    """
    issuer: EthrDID
    subject: EthrDID
    request_token: str
    own_claims: Dict[str, str] = field(default_factory=dict)
    verified_claims: List[str] = field(default_factory=list)
    issued_at: Optional[Number] = None
    expire_at: Optional[Number] = None
    jwt: Optional[str] = None


@dataclass(frozen=True)
class VerifiedClaim:
    """Claim as decoded from the wire, wrapped tokens still unresolved."""
    issuer: EthrDID
    subject: EthrDID
    title: str
    data: Dict[str, str] = field(default_factory=dict)
    wrapped: Dict[str, str] = field(default_factory=dict)
    category: Optional[CredentialCategory] = None
    preview: Optional[Preview] = None
    issued_at: Optional[Number] = None
    expire_at: Optional[Number] = None


@dataclass(frozen=True)
class CredentialDocument:
    """Resolved claim. Owns its nested documents (tree, never shared)."""
    issuer: EthrDID
    subject: EthrDID
    title: str
    jwt: str
    data: Dict[str, str] = field(default_factory=dict)
    category: Optional[CredentialCategory] = None
    preview: Optional[Preview] = None
    issued_at: Optional[Number] = None
    expire_at: Optional[Number] = None
    nested: List["CredentialDocument"] = field(default_factory=list)
    special_flag: Optional[SpecialCredentialFlag] = None


@dataclass(frozen=True)
class ForwardedRequest:
    """Indirection: parse `forwarded` in place of this envelope."""
    forwarded: str
    issuer: Optional[EthrDID] = None
    issued_at: Optional[Number] = None
    expire_at: Optional[Number] = None


# Everything the codec can produce
Envelope = Union[
    SelectiveDisclosureRequest,
    SelectiveDisclosureResponse,
    SelectiveDisclosureProposal,
    VerifiedClaim,
    ForwardedRequest,
]

# Everything the parse pipeline returns
ParsedEnvelope = Union[
    SelectiveDisclosureRequest,
    SelectiveDisclosureResponse,
    SelectiveDisclosureProposal,
    CredentialDocument,
]

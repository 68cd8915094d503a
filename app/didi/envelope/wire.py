"""Wire schemas for envelope payloads.

One pydantic model per envelope kind, declared once and used in both
directions: model_validate() checks a decoded JWT payload, model_dump()
renders the compact wire form. Unknown payload fields (aud, jti, ...) are
ignored.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from app.core.config import PROPOSAL_TYPE, REQUEST_TYPE, RESPONSE_TYPE
from app.didi.envelope.models import CredentialCategory
from app.didi.exceptions import IdentifierError
from app.didi.identifier import EthrDID


def _validate_did(value: Any) -> EthrDID:
    if isinstance(value, EthrDID):
        return value
    if not isinstance(value, str):
        raise ValueError("expected a DID string")
    try:
        return EthrDID.parse(value)
    except IdentifierError as e:
        # pydantic only collects ValueError into ValidationError
        raise ValueError(e.message)


DIDField = Annotated[
    EthrDID,
    PlainValidator(_validate_did),
    PlainSerializer(lambda did: did.did(), return_type=str),
]

WireNumber = Union[StrictInt, StrictFloat]


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# =============================================================================
# Claim specifications
# =============================================================================

class UserInfoSpecWire(WireModel):
    essential: Optional[StrictBool] = None
    reason: Optional[StrictStr] = None


class IssuerSelectorWire(WireModel):
    did: DIDField
    url: Optional[StrictStr] = None


class VerifiableSpecWire(WireModel):
    essential: Optional[StrictBool] = None
    iss: Optional[List[IssuerSelectorWire]] = None
    jwt: Optional[StrictStr] = None
    reason: Optional[StrictStr] = None


class ClaimsWire(WireModel):
    verifiable: Optional[Dict[StrictStr, Optional[VerifiableSpecWire]]] = None
    user_info: Optional[Dict[StrictStr, Optional[UserInfoSpecWire]]] = None


# =============================================================================
# Request / Proposal / Response
# =============================================================================

class SpecsWire(WireModel):
    """Shape shared by requests and proposals.

    requested/verified are the legacy array forms; claims.user_info and
    claims.verifiable are the structured forms that override them.
    """
    iss: DIDField
    claims: Optional[ClaimsWire] = None
    requested: Optional[List[StrictStr]] = None
    verified: Optional[List[StrictStr]] = None
    iat: Optional[WireNumber] = None
    exp: Optional[WireNumber] = None
    callback: Optional[StrictStr] = None


class RequestWire(SpecsWire):
    type: Literal["shareReq"]


class ProposalWire(SpecsWire):
    type: Literal["shareReqProposal"]


class ResponseWire(WireModel):
    type: Literal["shareResp"]
    iss: DIDField
    sub: DIDField
    req: StrictStr
    own: Dict[StrictStr, StrictStr] = Field(default_factory=dict)
    verified: List[StrictStr] = Field(default_factory=list)
    iat: Optional[WireNumber] = None
    exp: Optional[WireNumber] = None


# =============================================================================
# Claim (W3C-style "vc" payload)
# =============================================================================

class PreviewWire(WireModel):
    type: WireNumber
    fields: List[StrictStr]


class CredentialSubjectWire(WireModel):
    data: Optional[Dict[StrictStr, StrictStr]] = None
    wrapped: Optional[Dict[StrictStr, StrictStr]] = None
    category: Optional[CredentialCategory] = None
    preview: Optional[PreviewWire] = None


class VCWire(WireModel):
    context: List[StrictStr] = Field(alias="@context")
    type: List[StrictStr]
    credentialSubject: Dict[StrictStr, CredentialSubjectWire]

    @field_validator("credentialSubject")
    @classmethod
    def _single_title(cls, value: Dict[str, CredentialSubjectWire]) -> Dict[str, CredentialSubjectWire]:
        # The only key is the claim title
        if len(value) != 1:
            raise ValueError(f"must have exactly one key (the claim title), got {len(value)}")
        return value


class ClaimWire(WireModel):
    iss: DIDField
    sub: DIDField
    vc: VCWire
    iat: Optional[WireNumber] = None
    exp: Optional[WireNumber] = None


# =============================================================================
# Forwarding
# =============================================================================

class ForwardedWire(WireModel):
    forwarded: StrictStr
    iss: Optional[DIDField] = None
    iat: Optional[WireNumber] = None
    exp: Optional[WireNumber] = None


# Discriminator literal -> schema
TYPED_SCHEMAS: Dict[str, type] = {
    REQUEST_TYPE: RequestWire,
    RESPONSE_TYPE: ResponseWire,
    PROPOSAL_TYPE: ProposalWire,
}

# Schema -> name used in error paths
SCHEMA_NAMES: Dict[type, str] = {
    RequestWire: "SelectiveDisclosureRequest",
    ResponseWire: "SelectiveDisclosureResponse",
    ProposalWire: "SelectiveDisclosureProposal",
    ClaimWire: "VerifiedClaim",
    ForwardedWire: "ForwardedRequest",
}


def dump_wire(model: WireModel) -> Dict[str, Any]:
    """Render a wire model as its compact JSON-compatible dict."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_validation_error(kind: str, error: ValidationError) -> str:
    """List every violation with its path, separated by blank lines."""
    messages = []
    for err in error.errors():
        path = "/".join([kind, *(str(part) for part in err["loc"])])
        value = json.dumps(err.get("input"), default=str)
        messages.append(f"Invalid value {value} supplied to {path}: {err['msg']}")
    return "\n\n".join(messages)

"""
DIDI disclosure API models.

Error code registry shared by the parse pipeline and the HTTP layer, plus the
request/response bodies of the service endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Error Models
# =============================================================================

class ErrorDetail(BaseModel):
    """Error detail returned to API callers."""
    code: str
    message: str
    recoverable: bool


class ErrorCode:
    """Error code registry (closed set)."""
    # Identifier layer
    MALFORMED_ADDRESS = "MALFORMED_ADDRESS"
    BAD_PREFIX = "BAD_PREFIX"
    BAD_METHOD = "BAD_METHOD"

    # Envelope layer
    JWT_DECODE_ERROR = "JWT_DECODE_ERROR"
    SHAPE_DECODE_ERROR = "SHAPE_DECODE_ERROR"

    # Temporal layer
    AFTER_EXP = "AFTER_EXP"
    BEFORE_IAT = "BEFORE_IAT"

    # Verification layer
    VERIFICATION_ERROR = "VERIFICATION_ERROR"
    RESOLVER_CREATION_ERROR = "RESOLVER_CREATION_ERROR"

    # Resolution layer
    NONCREDENTIAL_WRAP_ERROR = "NONCREDENTIAL_WRAP_ERROR"
    RESOLUTION_DEPTH_EXCEEDED = "RESOLUTION_DEPTH_EXCEEDED"

    # Service layer
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Recoverability mapping. Only failures that may succeed on a later attempt
# (network-bound verification) are recoverable; the caller owns retries.
ERROR_RECOVERABILITY: Dict[str, bool] = {
    ErrorCode.MALFORMED_ADDRESS: False,
    ErrorCode.BAD_PREFIX: False,
    ErrorCode.BAD_METHOD: False,
    ErrorCode.JWT_DECODE_ERROR: False,
    ErrorCode.SHAPE_DECODE_ERROR: False,
    ErrorCode.AFTER_EXP: False,
    ErrorCode.BEFORE_IAT: False,
    ErrorCode.VERIFICATION_ERROR: True,      # Recoverable
    ErrorCode.RESOLVER_CREATION_ERROR: False,
    ErrorCode.NONCREDENTIAL_WRAP_ERROR: False,
    ErrorCode.RESOLUTION_DEPTH_EXCEEDED: False,
    ErrorCode.INTERNAL_ERROR: True,          # Recoverable
}


def to_error_detail(exc: Exception) -> ErrorDetail:
    """Convert domain exception to ErrorDetail for API response.

    Extracts error code and message from exception attributes,
    and looks up recoverability from ERROR_RECOVERABILITY mapping.
    """
    code = getattr(exc, "code", ErrorCode.INTERNAL_ERROR)
    message = getattr(exc, "message", str(exc))
    recoverable = ERROR_RECOVERABILITY.get(code, True)
    return ErrorDetail(code=code, message=message, recoverable=recoverable)


# =============================================================================
# /parse
# =============================================================================

class ParseRequest(BaseModel):
    """Request body for /parse."""
    jwt: str
    verify: bool = False
    audience: Optional[str] = None  # did:ethr or bare address


class ParseResponse(BaseModel):
    """Response body for /parse. Exactly one of envelope/error is set."""
    ok: bool
    envelope: Optional[Dict[str, Any]] = None
    error: Optional[ErrorDetail] = None


# =============================================================================
# /disclosure/claims
# =============================================================================

class PersonalDataModel(BaseModel):
    first_names: Optional[str] = None
    last_names: Optional[str] = None
    document: Optional[str] = None
    nationality: Optional[str] = None


class AddressModel(BaseModel):
    street: Optional[str] = None
    number: Optional[str] = None
    department: Optional[str] = None
    floor: Optional[str] = None
    neighborhood: Optional[str] = None
    post_code: Optional[str] = None


class IdentityModel(BaseModel):
    """Holder personal data as accepted over HTTP."""
    personal_data: PersonalDataModel = Field(default_factory=PersonalDataModel)
    email: Optional[str] = None
    cell_phone: Optional[str] = None
    address: AddressModel = Field(default_factory=AddressModel)


class DisclosureClaimsRequest(BaseModel):
    """Request body for /disclosure/claims."""
    request_jwt: str
    own_did: str
    documents: List[str] = Field(default_factory=list)
    identity: IdentityModel = Field(default_factory=IdentityModel)


class DisclosureClaimsResponse(BaseModel):
    """Claims selected for a disclosure response."""
    ok: bool
    own_claims: Dict[str, str] = Field(default_factory=dict)
    verified_claims: List[str] = Field(default_factory=list)
    missing_required: List[str] = Field(default_factory=list)
    error: Optional[ErrorDetail] = None

"""Envelope codec: wire payload <-> typed envelope.

decode_payload() selects the envelope kind, validates the payload against
that kind's wire schema and builds the domain object. encode_envelope() is
the inverse shape construction and never fails.
"""

import dataclasses
import json
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.core.config import PROPOSAL_TYPE, REQUEST_TYPE, RESPONSE_TYPE, VC_CONTEXT, VC_TYPE
from app.didi.envelope.models import (
    CredentialDocument,
    Envelope,
    ForwardedRequest,
    IssuerSelector,
    Preview,
    SelectiveDisclosureProposal,
    SelectiveDisclosureRequest,
    SelectiveDisclosureResponse,
    UserInfoSpec,
    VerifiableSpec,
    VerifiedClaim,
)
from app.didi.envelope.wire import (
    SCHEMA_NAMES,
    TYPED_SCHEMAS,
    ClaimsWire,
    ClaimWire,
    CredentialSubjectWire,
    ForwardedWire,
    IssuerSelectorWire,
    PreviewWire,
    ProposalWire,
    RequestWire,
    ResponseWire,
    SpecsWire,
    UserInfoSpecWire,
    VCWire,
    VerifiableSpecWire,
    dump_wire,
    format_validation_error,
)
from app.didi.exceptions import ShapeDecodeError
from app.didi.identifier import EthrDID


# =============================================================================
# Decode
# =============================================================================


def decode_payload(payload: Any) -> Envelope:
    """Decode a JWT payload into its envelope.

    Raises:
        ShapeDecodeError: Payload matches no envelope kind, or violates the
            schema of the kind it claims to be.
    """
    if not isinstance(payload, dict):
        raise ShapeDecodeError(
            f"Invalid value {json.dumps(payload, default=str)} supplied to Envelope: expected an object"
        )

    schema = _select_schema(payload)
    try:
        wire = schema.model_validate(payload)
    except ValidationError as e:
        raise ShapeDecodeError(format_validation_error(SCHEMA_NAMES[schema], e))

    if isinstance(wire, RequestWire):
        return SelectiveDisclosureRequest(**_specs_from_wire(wire))
    if isinstance(wire, ProposalWire):
        return SelectiveDisclosureProposal(**_specs_from_wire(wire))
    if isinstance(wire, ResponseWire):
        return _response_from_wire(wire)
    if isinstance(wire, ClaimWire):
        return _claim_from_wire(wire)
    return ForwardedRequest(forwarded=wire.forwarded, issuer=wire.iss, issued_at=wire.iat, expire_at=wire.exp)


def _select_schema(payload: Dict[str, Any]) -> type:
    """Pick the wire schema for a payload.

    A known type discriminator always wins. Without one, claims are
    recognised by their vc field and forwardings by their forwarded field.
    """
    kind = payload.get("type")
    if isinstance(kind, str) and kind in TYPED_SCHEMAS:
        return TYPED_SCHEMAS[kind]
    if "vc" in payload:
        return ClaimWire
    if "forwarded" in payload:
        return ForwardedWire

    expected = ", ".join(TYPED_SCHEMAS)
    raise ShapeDecodeError(
        f"Invalid value {json.dumps(kind, default=str)} supplied to Envelope/type: "
        f"expected one of {expected}, or a vc or forwarded field"
    )


def _specs_from_wire(wire: SpecsWire) -> Dict[str, Any]:
    # Legacy arrays first, structured maps override key-wise
    own_claims: Dict[str, UserInfoSpec] = {key: UserInfoSpec() for key in wire.requested or []}
    verified_claims: Dict[str, VerifiableSpec] = {title: VerifiableSpec() for title in wire.verified or []}

    claims = wire.claims or ClaimsWire()
    for key, spec in (claims.user_info or {}).items():
        own_claims[key] = _user_info_spec(spec)
    for title, spec in (claims.verifiable or {}).items():
        verified_claims[title] = _verifiable_spec(spec)

    return {
        "issuer": wire.iss,
        "own_claims": own_claims,
        "verified_claims": verified_claims,
        "issued_at": wire.iat,
        "expire_at": wire.exp,
        "callback": wire.callback,
    }


def _user_info_spec(spec: Optional[UserInfoSpecWire]) -> UserInfoSpec:
    if spec is None:
        return UserInfoSpec()
    return UserInfoSpec(essential=spec.essential, reason=spec.reason)


def _verifiable_spec(spec: Optional[VerifiableSpecWire]) -> VerifiableSpec:
    if spec is None:
        return VerifiableSpec()
    issuers = None
    if spec.iss is not None:
        issuers = [IssuerSelector(did=sel.did, url=sel.url) for sel in spec.iss]
    return VerifiableSpec(essential=spec.essential, iss=issuers, jwt=spec.jwt, reason=spec.reason)


def _response_from_wire(wire: ResponseWire) -> SelectiveDisclosureResponse:
    return SelectiveDisclosureResponse(
        issuer=wire.iss,
        subject=wire.sub,
        request_token=wire.req,
        own_claims=dict(wire.own),
        verified_claims=list(wire.verified),
        issued_at=wire.iat,
        expire_at=wire.exp,
    )


def _claim_from_wire(wire: ClaimWire) -> VerifiedClaim:
    ((title, subject),) = wire.vc.credentialSubject.items()
    preview = None
    if subject.preview is not None:
        preview = Preview(kind=subject.preview.type, fields=list(subject.preview.fields))
    return VerifiedClaim(
        issuer=wire.iss,
        subject=wire.sub,
        title=title,
        data=dict(subject.data or {}),
        wrapped=dict(subject.wrapped or {}),
        category=subject.category,
        preview=preview,
        issued_at=wire.iat,
        expire_at=wire.exp,
    )


# =============================================================================
# Encode
# =============================================================================


def encode_envelope(envelope: Envelope) -> Dict[str, Any]:
    """Render an envelope in its compact wire form.

    Requests and proposals always use the structured claims map; the legacy
    requested/verified arrays are never emitted.
    """
    if isinstance(envelope, SelectiveDisclosureRequest):
        return dump_wire(RequestWire(type=REQUEST_TYPE, **_specs_to_wire(envelope)))
    if isinstance(envelope, SelectiveDisclosureProposal):
        return dump_wire(ProposalWire(type=PROPOSAL_TYPE, **_specs_to_wire(envelope)))
    if isinstance(envelope, SelectiveDisclosureResponse):
        return dump_wire(ResponseWire(
            type=RESPONSE_TYPE,
            iss=envelope.issuer,
            sub=envelope.subject,
            req=envelope.request_token,
            own=envelope.own_claims,
            verified=envelope.verified_claims,
            iat=envelope.issued_at,
            exp=envelope.expire_at,
        ))
    if isinstance(envelope, VerifiedClaim):
        return dump_wire(_claim_to_wire(envelope))
    if isinstance(envelope, ForwardedRequest):
        return dump_wire(ForwardedWire(
            forwarded=envelope.forwarded,
            iss=envelope.issuer,
            iat=envelope.issued_at,
            exp=envelope.expire_at,
        ))
    raise TypeError(f"Not an envelope: {type(envelope).__name__}")


def _specs_to_wire(envelope) -> Dict[str, Any]:
    user_info = {
        key: UserInfoSpecWire(essential=spec.essential, reason=spec.reason)
        for key, spec in envelope.own_claims.items()
    }
    verifiable = {
        title: VerifiableSpecWire(
            essential=spec.essential,
            iss=None if spec.iss is None else [
                IssuerSelectorWire(did=sel.did, url=sel.url) for sel in spec.iss
            ],
            jwt=spec.jwt,
            reason=spec.reason,
        )
        for title, spec in envelope.verified_claims.items()
    }
    return {
        "iss": envelope.issuer,
        "claims": ClaimsWire(verifiable=verifiable, user_info=user_info),
        "iat": envelope.issued_at,
        "exp": envelope.expire_at,
        "callback": envelope.callback,
    }


def _claim_to_wire(claim: VerifiedClaim) -> ClaimWire:
    preview = None
    if claim.preview is not None:
        preview = PreviewWire(type=claim.preview.kind, fields=claim.preview.fields)
    subject = CredentialSubjectWire(
        data=claim.data,
        wrapped=claim.wrapped,
        category=claim.category,
        preview=preview,
    )
    return ClaimWire(
        iss=claim.issuer,
        sub=claim.subject,
        vc=VCWire(context=[VC_CONTEXT], type=[VC_TYPE], credentialSubject={claim.title: subject}),
        iat=claim.issued_at,
        exp=claim.expire_at,
    )


# =============================================================================
# JSON view
# =============================================================================


def envelope_to_dict(envelope: Any) -> Dict[str, Any]:
    """JSON-friendly view of a parsed envelope, tagged with its kind.

    Unlike encode_envelope() this keeps every domain field, including the
    attached jwt and resolved nested documents.
    """
    view = _jsonable(envelope)
    view["kind"] = type(envelope).__name__
    if isinstance(envelope, CredentialDocument):
        view["nested"] = [envelope_to_dict(child) for child in envelope.nested]
    return view


def _jsonable(value: Any) -> Any:
    if isinstance(value, EthrDID):
        return value.did()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value

"""
Claim selection for disclosure responses.

Given a request, the holder's credential documents and identity, decide which
own claims and verified claims go into the response and which essential
claims cannot be satisfied.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from app.didi.disclosure.identity import Identity
from app.didi.envelope.models import (
    CredentialDocument,
    IssuerSelector,
    SelectiveDisclosureRequest,
    VerifiableSpec,
)
from app.didi.identifier import EthrDID

log = logging.getLogger(__name__)

Accessor = Callable[[Identity], Optional[str]]


def _full_name(identity: Identity) -> Optional[str]:
    first = identity.personal_data.first_names
    last = identity.personal_data.last_names
    if first and last:
        return f"{first} {last}"
    return None


# Lower-cased request key synonyms -> accessor over the identity record
OWN_CLAIM_SYNONYMS: List[Tuple[Tuple[str, ...], Accessor]] = [
    (("nombre", "names", "firstnames"), lambda i: i.personal_data.first_names),
    (("apellido", "lastnames"), lambda i: i.personal_data.last_names),
    (("dni", "document"), lambda i: i.personal_data.document),
    (("name", "full name"), _full_name),
    (("email",), lambda i: i.email),
    (("country", "nationality"), lambda i: i.personal_data.nationality),
    (("cellphone", "phone"), lambda i: i.cell_phone),
    (("street", "streetaddress"), lambda i: i.address.street),
    (("numberstreet", "addressnumber"), lambda i: i.address.number),
    (("department",), lambda i: i.address.department),
    (("floor",), lambda i: i.address.floor),
    (("city", "neighborhood"), lambda i: i.address.neighborhood),
    (("zipcode", "postcode"), lambda i: i.address.post_code),
]

OWN_CLAIM_ACCESSORS: Dict[str, Accessor] = {
    synonym: accessor
    for synonyms, accessor in OWN_CLAIM_SYNONYMS
    for synonym in synonyms
}


@dataclass(frozen=True)
class ResponseClaims:
    """Claims selected for a response.

    Attributes:
        own_claims: Requested key -> value taken from the identity.
        verified_claims: Documents satisfying the requested titles, in
            request order.
        missing_required: Essential keys/titles that could not be satisfied;
            own-claim misses first.
    """
    own_claims: Dict[str, str] = field(default_factory=dict)
    verified_claims: List[CredentialDocument] = field(default_factory=list)
    missing_required: List[str] = field(default_factory=list)


def select_own_claims(
    request: SelectiveDisclosureRequest,
    identity: Identity,
) -> Tuple[Dict[str, str], List[str]]:
    """Answer the request's own claims from the identity record.

    Keys are matched case-insensitively but echoed back as requested.
    Unknown keys and empty values are left out.

    Returns:
        (own_claims, missing_required)
    """
    own_claims: Dict[str, str] = {}
    missing_required: List[str] = []

    for key, spec in request.own_claims.items():
        accessor = OWN_CLAIM_ACCESSORS.get(key.lower())
        value = accessor(identity) if accessor is not None else None
        if value:
            own_claims[key] = value
        elif spec.essential:
            missing_required.append(key)

    return own_claims, missing_required


def _matches_issuer(document: CredentialDocument, selectors: Optional[List[IssuerSelector]]) -> bool:
    if selectors is None:
        return True
    return any(selector.did == document.issuer for selector in selectors)


def _matches(document: CredentialDocument, title: str, spec: VerifiableSpec) -> bool:
    return (
        document.title == title
        and (spec.jwt is None or spec.jwt == document.jwt)
        and _matches_issuer(document, spec.iss)
    )


def select_verified_claims(
    own_did: EthrDID,
    request: SelectiveDisclosureRequest,
    documents: Sequence[CredentialDocument],
) -> Tuple[List[CredentialDocument], List[str]]:
    """Pick one document per requested title.

    Candidates are the holder's own documents, each followed by its direct
    nested documents. The first candidate matching title, jwt and issuer
    selector wins.

    Returns:
        (verified_claims, missing_required)
    """
    candidates: List[CredentialDocument] = []
    for document in documents:
        if document.subject == own_did:
            candidates.append(document)
            candidates.extend(document.nested)

    verified_claims: List[CredentialDocument] = []
    missing_required: List[str] = []

    for title, spec in request.verified_claims.items():
        selected = next((doc for doc in candidates if _matches(doc, title, spec)), None)
        if selected is not None:
            verified_claims.append(selected)
        elif spec.essential:
            missing_required.append(title)

    return verified_claims, missing_required


def get_response_claims(
    own_did: EthrDID,
    request: SelectiveDisclosureRequest,
    documents: Sequence[CredentialDocument],
    identity: Identity,
) -> ResponseClaims:
    """Select everything a response to `request` should carry."""
    verified_claims, verified_missing = select_verified_claims(own_did, request, documents)
    own_claims, own_missing = select_own_claims(request, identity)

    missing_required = own_missing + verified_missing
    if missing_required:
        log.info(f"Request from {request.issuer} has unsatisfied essential claims: {missing_required}")

    return ResponseClaims(
        own_claims=own_claims,
        verified_claims=verified_claims,
        missing_required=missing_required,
    )

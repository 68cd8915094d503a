"""Special credential classification.

Some credentials (validated phone numbers, validated email addresses) are
surfaced to consumers with their value pulled out of the credential data.
"""

from typing import Dict, List, Optional, Tuple

from app.didi.envelope.models import SpecialCredentialFlag, SpecialCredentialKind

# kind, accepted titles (case-insensitive), data field holding the value
SPECIAL_CREDENTIAL_RULES: List[Tuple[SpecialCredentialKind, Tuple[str, ...], str]] = [
    (
        SpecialCredentialKind.PHONE_NUMBER,
        ("phone", "phonenumber", "phone number", "telefono", "teléfono", "semilla telefono"),
        "phoneNumber",
    ),
    (
        SpecialCredentialKind.EMAIL,
        ("email", "e-mail", "correo", "correo electronico", "correo electrónico"),
        "email",
    ),
]


def extract_special_flag(title: str, data: Dict[str, str]) -> Optional[SpecialCredentialFlag]:
    """Classify a credential by title, returning its flag or None.

    A title match without the expected data field yields None.
    """
    normalized = title.strip().lower()
    for kind, titles, field_name in SPECIAL_CREDENTIAL_RULES:
        if normalized not in titles:
            continue
        value = data.get(field_name)
        if value:
            return SpecialCredentialFlag(kind=kind, value=value)
        return None
    return None

"""Ethereum-address DIDs (did:ethr).

An EthrDID has two equivalent textual forms, the bare key address
(0x + 40 hex digits) and did:ethr:<address>. Both parse to the same value;
did() always renders the canonical did:ethr form.
"""

import re
from dataclasses import dataclass

from app.core.config import DID_METHOD, DID_SCHEME
from app.didi.exceptions import BadMethodError, BadPrefixError, MalformedAddressError

KEY_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-f]{40}$", re.IGNORECASE)


@dataclass(frozen=True, eq=False)
class EthrDID:
    """Holder/issuer identifier.

    Equality and hashing use the case-folded address; the original casing is
    kept so key_address() returns exactly what was parsed.
    """
    address: str

    @classmethod
    def from_key_address(cls, address: str) -> "EthrDID":
        """Build from a bare 0x-prefixed address.

        Raises:
            MalformedAddressError: If address is not 0x + 40 hex digits.
        """
        if not isinstance(address, str) or not KEY_ADDRESS_PATTERN.match(address):
            raise MalformedAddressError(address)
        return cls(address)

    @classmethod
    def from_did(cls, did: str) -> "EthrDID":
        """Build from did:ethr:<address>.

        Raises:
            BadPrefixError: First segment is not "did".
            BadMethodError: Second segment is not "ethr".
            MalformedAddressError: Remaining segment is not a key address.
        """
        parts = did.split(":")
        if parts[0] != DID_SCHEME:
            raise BadPrefixError(did)
        if len(parts) < 2 or parts[1] != DID_METHOD:
            raise BadMethodError(did)
        return cls.from_key_address(":".join(parts[2:]))

    @classmethod
    def parse(cls, text: str) -> "EthrDID":
        """Accept either textual form."""
        if text.startswith(f"{DID_SCHEME}:"):
            return cls.from_did(text)
        return cls.from_key_address(text)

    def did(self) -> str:
        return f"{DID_SCHEME}:{DID_METHOD}:{self.address}"

    def key_address(self) -> str:
        return self.address

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EthrDID):
            return NotImplemented
        return self.address.lower() == other.address.lower()

    def __hash__(self) -> int:
        return hash(self.address.lower())

    def __str__(self) -> str:
        return self.did()

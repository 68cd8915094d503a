"""Holder identity record consulted when answering a request.

Read-only input: the selector never mutates it.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PersonalData:
    first_names: Optional[str] = None
    last_names: Optional[str] = None
    document: Optional[str] = None
    nationality: Optional[str] = None


@dataclass(frozen=True)
class Address:
    street: Optional[str] = None
    number: Optional[str] = None
    department: Optional[str] = None
    floor: Optional[str] = None
    neighborhood: Optional[str] = None
    post_code: Optional[str] = None


@dataclass(frozen=True)
class Identity:
    """Personal data, contact details and address of the holder."""
    personal_data: PersonalData = field(default_factory=PersonalData)
    email: Optional[str] = None
    cell_phone: Optional[str] = None
    address: Address = field(default_factory=Address)

"""Temporal validity gate for envelopes."""

import time
from typing import Optional

from app.didi.envelope.models import Number
from app.didi.exceptions import AfterExpiryError, BeforeIssuanceError


def current_time() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())


def check_temporal(
    issued_at: Optional[Number],
    expire_at: Optional[Number],
    now: Number,
) -> None:
    """Reject an envelope outside [issued_at, expire_at].

    Both bounds are inclusive and either may be absent. Expiry is checked
    first, so an envelope failing both reports AfterExpiryError.

    Raises:
        AfterExpiryError: expire_at < now.
        BeforeIssuanceError: now < issued_at.
    """
    if expire_at is not None and expire_at < now:
        raise AfterExpiryError(expected=expire_at, current=now)
    if issued_at is not None and now < issued_at:
        raise BeforeIssuanceError(expected=issued_at, current=now)

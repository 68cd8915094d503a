"""Unverified JWT decoding.

Reads the JSON segments of a compact JWT without touching the signature.
Signature checks belong to the verification delegate.

The parse pipeline only needs the payload, so decode_token_payload() reads the
second segment and ignores the rest. decode_token() is the strict form used
for inspection: exactly three segments with an object header and payload.
"""

import base64
import json
from typing import Any, Dict, List, Tuple

from app.didi.exceptions import TokenDecodeError


def decode_token_payload(jwt: str) -> Dict[str, Any]:
    """Decode the payload segment of a compact JWT.

    Raises:
        TokenDecodeError: Not a string, no payload segment, or a payload that
            is not a base64url-encoded JSON object.
    """
    segments = _segments(jwt)
    if len(segments) < 2:
        raise TokenDecodeError("missing payload segment")
    return _segment_object(segments[1], "payload")


def decode_token(jwt: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Decode a compact JWT into (header, payload).

    Raises:
        TokenDecodeError: Not a string, wrong number of segments, or a header
            or payload that is not a base64url-encoded JSON object.
    """
    segments = _segments(jwt)
    if len(segments) != 3:
        raise TokenDecodeError(f"expected 3 segments, got {len(segments)}")
    return _segment_object(segments[0], "header"), _segment_object(segments[1], "payload")


def _segments(jwt: Any) -> List[str]:
    if not isinstance(jwt, str) or not jwt:
        raise TokenDecodeError("token must be a non-empty string")
    return jwt.split(".")


def _segment_object(segment: str, name: str) -> Dict[str, Any]:
    # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
    try:
        value = json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))
    except ValueError as e:
        raise TokenDecodeError(f"{name} is not base64url-encoded JSON: {e}")
    except RecursionError:
        raise TokenDecodeError(f"{name} JSON is nested too deeply")

    if not isinstance(value, dict):
        raise TokenDecodeError(f"{name} must be a JSON object, got {type(value).__name__}")
    return value

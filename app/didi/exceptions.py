"""
DIDI disclosure exceptions.

Every failure the engine can report is a DisclosureError subclass carrying an
error code from ErrorCode. The parse pipeline catches DisclosureError at its
entry points and returns it inside a ParseResult; the HTTP layer converts it
with to_error_detail().
"""

from typing import Any

from app.didi.api_models import ErrorCode


class DisclosureError(Exception):
    """Base exception for the disclosure engine.

    Carries an error code that maps to ErrorCode constants.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


# =============================================================================
# Identifier errors
# =============================================================================

class IdentifierError(DisclosureError):
    """Base exception for DID/address parsing errors."""


class MalformedAddressError(IdentifierError):
    """Address is not 0x followed by exactly 40 hex digits."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(ErrorCode.MALFORMED_ADDRESS, f"Malformed key address: {address!r}")


class BadPrefixError(IdentifierError):
    """DID does not start with the did scheme."""

    def __init__(self, did: str):
        self.did = did
        super().__init__(ErrorCode.BAD_PREFIX, f"Bad DID prefix: {did!r}")


class BadMethodError(IdentifierError):
    """DID method is not the expected one."""

    def __init__(self, did: str):
        self.did = did
        super().__init__(ErrorCode.BAD_METHOD, f"Bad DID method: {did!r}")


# =============================================================================
# Envelope errors
# =============================================================================

class TokenDecodeError(DisclosureError):
    """The token itself is not a decodable JWT."""

    def __init__(self, cause: Any):
        self.cause = cause
        super().__init__(ErrorCode.JWT_DECODE_ERROR, f"JWT decode failed: {cause}")


class ShapeDecodeError(DisclosureError):
    """Decoded payload does not match any envelope shape.

    The message lists every violation found, separated by blank lines.
    """

    def __init__(self, message: str):
        super().__init__(ErrorCode.SHAPE_DECODE_ERROR, message)


# =============================================================================
# Temporal errors
# =============================================================================

class TemporalError(DisclosureError):
    """Envelope is outside its validity window."""

    def __init__(self, code: str, message: str, expected: float, current: float):
        self.expected = expected
        self.current = current
        super().__init__(code, message)


class AfterExpiryError(TemporalError):
    """now > exp."""

    def __init__(self, expected: float, current: float):
        super().__init__(
            ErrorCode.AFTER_EXP,
            f"token expired: exp={expected}, now={current}",
            expected,
            current,
        )


class BeforeIssuanceError(TemporalError):
    """now < iat."""

    def __init__(self, expected: float, current: float):
        super().__init__(
            ErrorCode.BEFORE_IAT,
            f"token used before issuance: iat={expected}, now={current}",
            expected,
            current,
        )


# =============================================================================
# Verification errors
# =============================================================================

class VerificationError(DisclosureError):
    """Delegate rejected the token (signature, issuer, audience, resolution)."""

    def __init__(self, cause: Any):
        self.cause = cause
        super().__init__(ErrorCode.VERIFICATION_ERROR, f"Verification failed: {cause}")


class ResolverCreationError(DisclosureError):
    """Resolver could not be built from the configured endpoint."""

    def __init__(self, cause: Any = None):
        self.cause = cause
        message = "Resolver creation failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(ErrorCode.RESOLVER_CREATION_ERROR, message)


# =============================================================================
# Resolution errors
# =============================================================================

class NonCredentialWrapError(DisclosureError):
    """A claim wraps a token that is not itself a claim."""

    def __init__(self, message: str = "Credential wraps a non-credential token"):
        super().__init__(ErrorCode.NONCREDENTIAL_WRAP_ERROR, message)


class ResolutionDepthExceededError(DisclosureError):
    """Forwarding/nesting chain is deeper than the configured limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            ErrorCode.RESOLUTION_DEPTH_EXCEEDED,
            f"Forwarding/nesting depth exceeds {limit}",
        )

"""
Verification delegate interface.

Signature checking and DID resolution live outside this package. The parse
pipeline only needs to build a resolver for an endpoint and to exchange a
token for its verified payload; anything the delegate raises is reported as
ResolverCreationError or VerificationError by the pipeline.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class VerificationDelegate(ABC):
    """Verifies signed tokens against DIDs resolved over an ethr endpoint."""

    @abstractmethod
    def create_resolver(self, endpoint: str) -> Any:
        """Build a DID resolver for the given JSON-RPC endpoint.

        The returned object is opaque to the pipeline and only handed back
        to the verify methods.
        """
        ...

    @abstractmethod
    async def verify_envelope(
        self,
        token: str,
        resolver: Any,
        audience: Optional[str],
    ) -> Dict[str, Any]:
        """Verify a request/response/proposal/forwarding token.

        Args:
            token: Compact JWT.
            resolver: Value returned by create_resolver().
            audience: did:ethr string the token must be addressed to, or None.

        Returns:
            The verified payload.
        """
        ...

    @abstractmethod
    async def verify_credential(self, token: str, resolver: Any) -> Dict[str, Any]:
        """Verify a credential token and return its verified payload."""
        ...

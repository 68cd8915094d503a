"""
DIDI disclosure engine configuration constants.

Constants are organized into:
- NORMATIVE: Fixed by the wire protocol, cannot change without breaking peers
- CONFIGURABLE: Defaults that a deployment may override
- OPERATIONAL: Deployment-specific settings (env vars)
"""

import os

# =============================================================================
# NORMATIVE CONSTANTS (fixed by protocol)
# =============================================================================

# Identifier textual form: did:<method>:<address>
DID_SCHEME: str = "did"
DID_METHOD: str = "ethr"

# W3C credential envelope values emitted when encoding claims
VC_CONTEXT: str = "https://www.w3.org/2018/credentials/v1"
VC_TYPE: str = "VerifiableCredential"

# Envelope discriminators on the wire
REQUEST_TYPE: str = "shareReq"
RESPONSE_TYPE: str = "shareResp"
PROPOSAL_TYPE: str = "shareReqProposal"

# REST transport for disclosure responses
SUBMIT_CONTENT_TYPE: str = "application/json; charset=utf-8"

# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================

# Upper bound on forwarding/nesting recursion while resolving a token.
# Each forwarded token or wrapped credential adds one level.
MAX_RESOLUTION_DEPTH: int = int(os.getenv("DIDI_MAX_RESOLUTION_DEPTH", "16"))

# httpx client timeout for the single submission attempt
SUBMIT_TIMEOUT_SECONDS: float = float(os.getenv("DIDI_SUBMIT_TIMEOUT", "10.0"))

# =============================================================================
# OPERATIONAL SETTINGS (deployment-specific, via environment variables)
# =============================================================================

# JSON-RPC endpoint handed to the verification delegate's resolver
ETHR_RPC_URL: str = os.getenv("DIDI_ETHR_RPC_URL", "http://localhost:8545")

# Controls whether /admin endpoint returns configuration data
ADMIN_ENDPOINT_ENABLED: bool = os.getenv("ADMIN_ENDPOINT_ENABLED", "true").lower() == "true"

# Root log level applied at startup; /admin/log-level changes it at runtime
LOG_LEVEL: str = os.getenv("DIDI_LOG_LEVEL", "INFO").upper()

# When set, JSON log lines are also appended to this file
LOG_FILE: str = os.getenv("DIDI_LOG_FILE", "")

"""Authentication module: request signing and secret redaction."""

from ftxc.auth.redact import (
    REDACTED,
    mask_string,
    redact_secrets,
    safe_dict_for_logging,
)
from ftxc.auth.signer import (
    Signer,
    canonical_path,
    rest_prehash,
    timestamp_ms,
    ws_login_prehash,
)

__all__ = [
    # Signing
    "Signer",
    "canonical_path",
    "rest_prehash",
    "timestamp_ms",
    "ws_login_prehash",
    # Redaction
    "REDACTED",
    "mask_string",
    "redact_secrets",
    "safe_dict_for_logging",
]

"""Keep API keys and signatures out of logs and exception messages.

USAGE:
    from ftxc.auth.redact import redact_secrets, safe_dict_for_logging

    logger.debug(f"headers: {safe_dict_for_logging(dict(request.headers))}")
    raise TransportError(redact_secrets(str(exc)))
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from re import Pattern

REDACTED = "***REDACTED***"

SECRET_PATTERNS: dict[str, Pattern[str]] = {
    # HMAC-SHA256 hex digests (FTX-SIGN, stream login "sign")
    "signature": re.compile(r"\b[a-fA-F0-9]{64}\b"),
    # FTX API keys and secrets are 40 url-safe characters
    "api_key": re.compile(r"\b[A-Za-z0-9_-]{40}\b"),
}

# Header and field names whose values are always secret (lowercase)
SECRET_KEYS = frozenset(
    {
        "ftx-key",
        "ftx-sign",
        "sign",
        "key",
        "secret",
        "api_key",
        "api_secret",
        "public_key",
        "private_key",
        "password",
    }
)


def redact_secrets(text: str, replacement: str = REDACTED) -> str:
    """Replace signature- and key-shaped tokens in ``text``."""
    for pattern in SECRET_PATTERNS.values():
        text = pattern.sub(replacement, text)
    return text


def mask_string(value: str, visible_chars: int = 4) -> str:
    """Keep ``visible_chars`` at each end of ``value`` and elide the middle.

    Values too short to keep both ends are fully starred:

        >>> mask_string("1234567890abcdef")
        '1234...cdef'
        >>> mask_string("short")
        '*****'
    """
    if len(value) <= 2 * visible_chars:
        return "*" * len(value)
    head, tail = value[:visible_chars], value[-visible_chars:]
    return f"{head}...{tail}"


def safe_dict_for_logging(
    data: Mapping[str, object], redact_keys: set[str] | None = None
) -> dict[str, object]:
    """Copy a mapping with secret values replaced, recursing into nested maps.

    Keys are compared case-insensitively, so HTTP header mappings work as-is.
    """
    secret_keys = SECRET_KEYS.union(k.lower() for k in redact_keys or ())

    def scrub(key: str, value: object) -> object:
        if key.lower() in secret_keys:
            return REDACTED
        if isinstance(value, Mapping):
            return safe_dict_for_logging(value, redact_keys)
        return value

    return {k: scrub(k, v) for k, v in data.items()}

"""Request signing for the FTX REST and WebSocket APIs.

AUTHENTICATION:
Every authenticated call is signed with HMAC-SHA256 keyed by the API
secret. The signed string ("prehash") is a plain concatenation with no
delimiters, so it is position and case sensitive:

    REST:      timestamp_ms + METHOD + canonical_path + body
    WebSocket: timestamp_ms + "websocket_login"

The canonical path is what the server reconstructs from the request it
receives: for GET it is path + "?" + query string, for POST/DELETE it is
the path alone (parameters travel in the JSON body).
"""

from __future__ import annotations

import hashlib
import hmac
import threading
import time
from typing import TYPE_CHECKING
from urllib.parse import quote

from ftxc.auth.redact import mask_string
from ftxc.errors import AuthConfigMissing

if TYPE_CHECKING:
    from ftxc.config import Settings

WS_LOGIN_SUFFIX = "websocket_login"


def timestamp_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def canonical_path(raw_path: str) -> str:
    """Return the path(+query) string used for signing.

    A request built with an empty parameter list can carry a bare trailing
    ``?``; the exchange does not include it when it rebuilds the string.
    """
    return raw_path[:-1] if raw_path.endswith("?") else raw_path


def rest_prehash(timestamp: int, method: str, path: str, body: str | None = None) -> str:
    """Build the signed string for a REST call."""
    return f"{timestamp}{method}{path}{body or ''}"


def ws_login_prehash(timestamp: int) -> str:
    """Build the signed string for the stream login message."""
    return f"{timestamp}{WS_LOGIN_SUFFIX}"


class Signer:
    """Holds the API key pair and the selected subaccount.

    The private key never leaves this object: it is not part of ``repr``,
    and only digests computed from it are exposed. The subaccount is the
    one mutable field and is swapped under a lock.
    """

    def __init__(
        self,
        public_key: str,
        private_key: str | bytes,
        subaccount: str | None = None,
    ) -> None:
        self.public_key = public_key
        self._private_key = (
            private_key.encode("utf-8") if isinstance(private_key, str) else bytes(private_key)
        )
        self._subaccount = subaccount
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Signer | None:
        """Build a signer from configuration, or None when no key pair is set."""
        public_key, private_key = settings.public_key, settings.private_key
        if not public_key or private_key is None:
            return None
        return cls(
            public_key=public_key,
            private_key=private_key.get_secret_value(),
            subaccount=settings.subaccount,
        )

    @property
    def subaccount(self) -> str | None:
        with self._lock:
            return self._subaccount

    def change_subaccount(self, subaccount: str | None) -> None:
        """Select another subaccount (None selects the main account)."""
        with self._lock:
            self._subaccount = subaccount

    def sign(self, prehash: str) -> str:
        """Compute the lowercase hex HMAC-SHA256 of ``prehash``.

        Raises:
            AuthConfigMissing: If the private key is empty
        """
        if not self._private_key:
            raise AuthConfigMissing("failed to use an empty FTX private key as a HMAC-SHA256 key")
        return hmac.new(self._private_key, prehash.encode("utf-8"), hashlib.sha256).hexdigest()

    def auth_headers(
        self,
        method: str,
        path: str,
        body: str | None = None,
        timestamp: int | None = None,
    ) -> dict[str, str]:
        """Build the FTX auth headers for one REST call.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: Canonical path, see ``canonical_path``
            body: JSON body exactly as transmitted (None for GET)
            timestamp: Milliseconds since epoch (defaults to now)

        Returns:
            Headers to merge into the request
        """
        ts = timestamp if timestamp is not None else timestamp_ms()
        signature = self.sign(rest_prehash(ts, method, path, body))

        headers = {
            "FTX-KEY": self.public_key,
            "FTX-TS": str(ts),
            "FTX-SIGN": signature,
        }
        subaccount = self.subaccount
        if subaccount:
            # Nicknames may contain '/' and spaces
            headers["FTX-SUBACCOUNT"] = quote(subaccount, safe="")
        return headers

    def __repr__(self) -> str:
        return f"Signer(public_key={mask_string(self.public_key)!r}, subaccount={self.subaccount!r})"

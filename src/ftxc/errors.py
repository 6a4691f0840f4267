"""Exception hierarchy for REST and stream failures.

Every failure is raised to the immediate caller. Nothing here is retried
or swallowed; recovery policy belongs to the application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ftxc.envelope import ResponseEnvelope


class FtxError(Exception):
    """Base exception for FTX client errors."""


class AuthConfigMissing(FtxError):
    """Operation needs credentials but none are configured (or they are unusable)."""


class TransportError(FtxError):
    """Connection, send or receive failure at the channel level."""


class HttpStatusError(FtxError):
    """Non-2xx HTTP response."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ApplicationError(FtxError):
    """Response envelope reported ``success: false``."""

    def __init__(self, envelope: ResponseEnvelope[Any]) -> None:
        detail = envelope.error or "no error message"
        super().__init__(f"success = false in response: {detail}")
        self.envelope = envelope

    @property
    def error(self) -> str | None:
        return self.envelope.error


class DecodeError(FtxError):
    """Payload could not be parsed or did not match the expected shape."""

    def __init__(self, raw: str, cause: Exception) -> None:
        super().__init__(f"error {cause} while deserializing {raw}")
        self.raw = raw
        self.cause = cause


class ProtocolViolation(FtxError):
    """Unexpected frame kind in the application-message stream."""

    def __init__(self, frame_kind: str) -> None:
        super().__init__(f"unexpected {frame_kind} frame in the application message stream")
        self.frame_kind = frame_kind

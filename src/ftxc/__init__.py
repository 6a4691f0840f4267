"""Async client for the FTX REST and WebSocket trading APIs."""

from ftxc.auth import Signer
from ftxc.client import FtxClient
from ftxc.config import Settings, get_settings
from ftxc.envelope import ResponseEnvelope
from ftxc.errors import (
    ApplicationError,
    AuthConfigMissing,
    DecodeError,
    FtxError,
    HttpStatusError,
    ProtocolViolation,
    TransportError,
)
from ftxc.websocket import SessionState, StreamSession

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Client
    "FtxClient",
    "Settings",
    "Signer",
    "StreamSession",
    "SessionState",
    "ResponseEnvelope",
    "get_settings",
    # Errors
    "ApplicationError",
    "AuthConfigMissing",
    "DecodeError",
    "FtxError",
    "HttpStatusError",
    "ProtocolViolation",
    "TransportError",
]

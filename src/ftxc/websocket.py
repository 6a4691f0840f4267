"""WebSocket session for the FTX streaming API.

One ``StreamSession`` owns one connection. The session performs no
subscription bookkeeping, keep-alive or reconnection: the caller sends
``Login``/``Subscribe``/``Ping`` messages and consumes the decoded inbound
sequence.

Example:
    async with await client.websocket() as ws:
        await client.send_ws_login(ws)
        await ws.subscribe(OrdersChannel())

        async for msg in ws:
            print(msg)

Inbound frames are decoded as follows:

- text frames: JSON, dispatched on ``type`` then on ``channel``
- close frame from the server: a single ``Closed`` message, then the
  sequence ends
- binary, ping, pong or continuation frames in the message position:
  ``ProtocolViolation`` (the protocol is JSON text only)

A decode error does not terminate the session; iteration can resume with
the next message.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.frames import Frame, Opcode

from ftxc.auth.redact import redact_secrets
from ftxc.errors import DecodeError, ProtocolViolation, TransportError
from ftxc.logging import get_logger
from ftxc.models import loads_exact
from ftxc.models.websocket import (
    Channel,
    Closed,
    InMessage,
    OutMessage,
    Ping,
    Subscribe,
    Unsubscribe,
    wire_message_adapter,
)

if TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection

logger = get_logger("websocket")


class SessionState(str, Enum):
    """Lifecycle of a stream session."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


def decode_text(text: str) -> InMessage:
    """Decode one JSON text message into the inbound union.

    Raises:
        DecodeError: Invalid JSON, unknown ``type``/``channel`` or bad shape
    """
    logger.debug(f"Incoming websocket message {text}")
    try:
        message: InMessage = wire_message_adapter.validate_python(loads_exact(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise DecodeError(text, e) from e
    return message


def parse_message(raw: str | bytes | Frame) -> InMessage:
    """Classify one received item and decode it.

    Accepts what ``websockets`` hands to the application (``str`` for text,
    ``bytes`` for binary) as well as raw frames.

    Raises:
        ProtocolViolation: Binary or control frame in the message position
        DecodeError: Text frame that does not decode
    """
    if isinstance(raw, str):
        return decode_text(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raise ProtocolViolation("binary")

    if raw.opcode is Opcode.TEXT:
        try:
            text = bytes(raw.data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(repr(bytes(raw.data)), e) from e
        return decode_text(text)
    if raw.opcode is Opcode.CLOSE:
        return Closed()
    raise ProtocolViolation(raw.opcode.name.lower())


class StreamSession:
    """A connected WebSocket session.

    Send and receive may run in separate tasks. Writes are not serialized
    internally: callers must not issue overlapping ``send`` calls.
    """

    def __init__(self, connection: ClientConnection) -> None:
        self._ws = connection
        self._state = SessionState.OPEN

    @classmethod
    async def connect(
        cls,
        url: str,
        user_agent: str,
        open_timeout: float | None = None,
    ) -> StreamSession:
        """Open a connection and return an ``OPEN`` session.

        The library-level ping is disabled; liveness is the caller's concern.

        Raises:
            TransportError: If the connection or handshake fails
        """
        import websockets

        logger.info(f"Connecting to {url}")
        try:
            connection = await websockets.connect(
                url,
                user_agent_header=user_agent,
                open_timeout=open_timeout,
                ping_interval=None,
                ping_timeout=None,
            )
        except (InvalidHandshake, InvalidURI, OSError, TimeoutError) as e:
            raise TransportError(f"connection error: {redact_secrets(str(e))}") from e

        logger.info("WebSocket connected")
        return cls(connection)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state is SessionState.CLOSED

    async def send(self, message: OutMessage) -> None:
        """Serialize and write one outbound message.

        Raises:
            TransportError: If the session is closed or the write fails
        """
        if self._state is SessionState.CLOSED:
            raise TransportError("cannot send on a closed session")

        text = message.model_dump_json()
        if message.op == "login":
            logger.debug("Sending login message through websocket")
        else:
            logger.debug(f"Sending '{text}' through websocket")

        try:
            await self._ws.send(text)
        except ConnectionClosed as e:
            self._state = SessionState.CLOSED
            raise TransportError(f"send failed, connection closed: {e}") from e

    async def subscribe(self, channel: Channel) -> None:
        await self.send(Subscribe(channel=channel))

    async def unsubscribe(self, channel: Channel) -> None:
        await self.send(Unsubscribe(channel=channel))

    async def ping(self) -> None:
        await self.send(Ping())

    async def recv(self) -> InMessage | None:
        """Receive and decode the next message.

        Returns:
            The next inbound message, ``Closed`` once when the server closes
            the connection, then None (end of sequence) forever after.

        Raises:
            TransportError: Connection dropped without a close frame
            ProtocolViolation: Unexpected frame kind
            DecodeError: Undecodable text message
        """
        if self._state is SessionState.CLOSED:
            return None

        try:
            raw = await self._ws.recv()
        except ConnectionClosed as e:
            closed_locally = self._state is SessionState.CLOSED
            self._state = SessionState.CLOSED
            if closed_locally:
                return None
            if e.rcvd is not None:
                logger.info(f"WebSocket closed by server: {e.rcvd}")
                return Closed()
            raise TransportError(f"connection lost: {e}") from e

        if self._state is SessionState.CLOSED:
            # close() raced with a delivered frame
            return None
        return parse_message(raw)

    def __aiter__(self) -> StreamSession:
        return self

    async def __anext__(self) -> InMessage:
        message = await self.recv()
        if message is None:
            raise StopAsyncIteration
        return message

    async def close(self) -> None:
        """Close the connection; pending and later receives end the sequence."""
        if self._state is SessionState.CLOSED:
            return
        self._state = SessionState.CLOSED
        await self._ws.close()
        logger.info("WebSocket session closed")

    async def __aenter__(self) -> StreamSession:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

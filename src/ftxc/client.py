"""FTX API client: signed REST dispatch and stream session factory.

AUTHENTICATION:
Descriptors with ``needs_auth`` are signed with HMAC-SHA256 over

    timestamp_ms + METHOD + canonical_path + body

and carry FTX-KEY, FTX-TS and FTX-SIGN headers (plus FTX-SUBACCOUNT when a
subaccount is selected). The canonical path is taken from the request
exactly as it will be transmitted, and the signed body is the same string
that is sent, so signing cannot drift from the wire.

ERRORS:
Failures are raised immediately; nothing is retried. See ``ftxc.errors``.

USAGE:
    async with FtxClient.with_auth(key, secret) as client:
        balances = await client.request(Balances())
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from ftxc.auth.redact import redact_secrets, safe_dict_for_logging
from ftxc.auth.signer import Signer, canonical_path, timestamp_ms, ws_login_prehash
from ftxc.config import Settings, get_settings
from ftxc.envelope import decode_envelope
from ftxc.errors import AuthConfigMissing, HttpStatusError, TransportError
from ftxc.logging import get_logger
from ftxc.models.websocket import Login, LoginArgs
from ftxc.request import Request
from ftxc.websocket import StreamSession

logger = get_logger("client")


class FtxClient:
    """Client for the FTX REST and WebSocket APIs.

    The client is reentrant: concurrent ``request`` calls share one
    connection pool but are otherwise independent. The only mutable state is
    the selected subaccount, which is swapped under the signer's lock.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        signer: Signer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], int] = timestamp_ms,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Client settings (uses global if not provided)
            signer: Credentials; defaults to the key pair in settings, if any
            transport: Custom httpx transport (tests use ``httpx.MockTransport``)
            clock: Millisecond timestamp source used for signing
        """
        self._settings = settings or get_settings()
        self._signer = signer if signer is not None else Signer.from_settings(self._settings)
        self._transport = transport
        self._clock = clock
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def with_auth(
        cls,
        public_key: str,
        private_key: str | bytes,
        subaccount: str | None = None,
        **kwargs: Any,
    ) -> FtxClient:
        """Create a client with an explicit key pair."""
        return cls(signer=Signer(public_key, private_key, subaccount), **kwargs)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def is_authenticated(self) -> bool:
        return self._signer is not None

    @property
    def subaccount(self) -> str | None:
        return self._signer.subaccount if self._signer is not None else None

    def change_subaccount(self, subaccount: str | None) -> None:
        """Select the subaccount used by subsequent calls.

        Raises:
            AuthConfigMissing: If the client has no credentials
        """
        signer = self._require_signer("no auth data present, can't change subaccount")
        signer.change_subaccount(subaccount)
        logger.info(f"Switched to subaccount {subaccount or 'main'}")

    def _require_signer(self, message: str = "missing auth data") -> Signer:
        if self._signer is None:
            raise AuthConfigMissing(message)
        return self._signer

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.http_timeout),
                headers={"user-agent": self._settings.user_agent},
                transport=self._transport,
            )
        return self._client

    def build_request(self, request: Request) -> httpx.Request:
        """Render, and sign if required, the HTTP request for a descriptor.

        GET parameters go in the query string and are part of the signed
        path; POST/DELETE parameters go in a JSON body that is signed as-is.

        Raises:
            AuthConfigMissing: If the descriptor needs auth and none is configured
        """
        client = self._get_client()
        url = f"{self._settings.api_url}{request.render_endpoint()}"

        body: str | None
        if request.method == "GET":
            params = request.to_query_params() or None
            http_request = client.build_request("GET", url, params=params)
            body = None
            logger.debug(f"sending GET message, url: {http_request.url}")
        else:
            body = request.to_json_body()
            http_request = client.build_request(
                request.method,
                url,
                content=body.encode("utf-8"),
                headers={"content-type": "application/json"},
            )
            logger.debug(
                f"sending {request.method} message, url: {http_request.url}, body: {body}"
            )

        if request.needs_auth:
            signer = self._require_signer()
            raw_path = http_request.url.raw_path.decode("ascii")
            if body is not None:
                raw_path = raw_path.partition("?")[0]
            http_request.headers.update(
                signer.auth_headers(
                    request.method,
                    canonical_path(raw_path),
                    body,
                    timestamp=self._clock(),
                )
            )

        logger.debug(f"headers: {safe_dict_for_logging(dict(http_request.headers))}")
        return http_request

    async def request(self, request: Request) -> Any:
        """Execute one operation and return its decoded result.

        Args:
            request: Operation descriptor

        Returns:
            The envelope's ``result``, validated as ``request.response_type``

        Raises:
            AuthConfigMissing: Descriptor needs auth and none is configured
            TransportError: The request could not be sent or read
            HttpStatusError: Non-2xx response
            ApplicationError: Envelope reported ``success: false``
            DecodeError: Body did not match the expected shape
        """
        http_request = self.build_request(request)

        try:
            response = await self._get_client().send(http_request)
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {redact_secrets(str(e))}") from e

        return self._handle_response(request, response)

    def _handle_response(self, request: Request, response: httpx.Response) -> Any:
        text = response.text
        if not response.is_success:
            logger.warning(f"HTTP error: {response.status_code} - {text}")
            raise HttpStatusError(response.status_code, text)

        logger.debug(f"got message: {text}")
        return decode_envelope(text, request.response_type)

    # ==========================================================================
    # Streaming
    # ==========================================================================

    async def websocket(self) -> StreamSession:
        """Open a stream session (unauthenticated until ``send_ws_login``).

        Raises:
            TransportError: If the handshake fails
        """
        return await StreamSession.connect(
            self._settings.ws_url,
            user_agent=self._settings.user_agent,
            open_timeout=self._settings.ws_open_timeout,
        )

    async def send_ws_login(self, session: StreamSession) -> None:
        """Authenticate a stream session with the client's credentials.

        Raises:
            AuthConfigMissing: If the client has no credentials
            TransportError: If the session is closed or the send fails
        """
        signer = self._require_signer("missing auth keys")
        timestamp = self._clock()
        signature = signer.sign(ws_login_prehash(timestamp))

        await session.send(
            Login(
                args=LoginArgs(
                    key=signer.public_key,
                    sign=signature,
                    time=timestamp,
                    subaccount=signer.subaccount,
                )
            )
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> FtxClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

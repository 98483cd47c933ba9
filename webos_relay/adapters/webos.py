"""webOS SSAP client over aiohttp websockets."""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
import logging
from typing import Any, Mapping, Optional

import aiohttp

from ..constants import DEFAULT_TV_PORT
from ..core import WebOSCommand, WebOSResponse

LOGGER = logging.getLogger(__name__)
FRAME_LOGGER = logging.getLogger(f"{__name__}.frames")

REGISTER_ID = "register_0"

DEFAULT_MANIFEST: dict[str, Any] = {
    "manifestVersion": 1,
    "appVersion": "1.1",
    "localizedAppNames": {"": "webos-relay"},
    "localizedVendorNames": {"": "webos-relay"},
    "permissions": [
        "CONTROL_AUDIO",
        "CONTROL_POWER",
        "READ_INSTALLED_APPS",
        "READ_CURRENT_CHANNEL",
        "READ_RUNNING_APPS",
        "READ_TV_CURRENT_TIME",
        "READ_POWER_STATE",
    ],
}


class WebOSError(RuntimeError):
    """Raised when the television rejects a request or the handshake."""


class WebOSConnectionError(WebOSError):
    """Raised when the websocket is not open or closes mid-request."""


def build_url(address: str, port: int = DEFAULT_TV_PORT) -> str:
    return f"ws://{address}:{port}/"


class WebOSClient:
    """A single registered websocket session with a webOS television."""

    def __init__(
        self,
        url: str,
        *,
        client_key: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        request_timeout: float = 5.0,
        register_timeout: float = 60.0,
        manifest: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.url = url
        self.request_timeout = request_timeout
        self.register_timeout = register_timeout
        self._client_key = client_key
        self._manifest = dict(manifest or DEFAULT_MANIFEST)

        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    @property
    def client_key(self) -> Optional[str]:
        return self._client_key

    @property
    def closed(self) -> bool:
        return self._ws is None or self._ws.closed

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        """Open the websocket and complete registration.

        Raises:
            WebOSError: If the television refuses registration.
            asyncio.TimeoutError: If registration does not finish in time.
            aiohttp.ClientError: If the websocket cannot be opened.
        """

        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

        self._ws = await self._session.ws_connect(self.url, autoping=True)
        LOGGER.debug("Websocket open to %s", self.url)
        self._reader_task = asyncio.create_task(self._read_loop(self._ws))

        async with asyncio.timeout(self.register_timeout):
            await self._register()

    async def request(self, command: WebOSCommand) -> WebOSResponse:
        """Send ``command`` and return the television's response.

        Raises:
            WebOSError: If the television answers with an error frame.
            WebOSConnectionError: If the websocket is closed.
            asyncio.TimeoutError: If no response arrives in time.
        """

        request_id = f"request_{next(self._ids)}"
        message: dict[str, Any] = {
            "type": "request",
            "id": request_id,
            "uri": command.uri,
        }
        if command.payload is not None:
            message["payload"] = dict(command.payload)

        async with asyncio.timeout(self.request_timeout):
            reply = await self._send_and_wait(request_id, message)

        response = WebOSResponse.from_message(reply)
        if response.type == "error":
            raise WebOSError(
                f"{command.uri} failed: {reply.get('error') or 'unknown error'}"
            )
        return response

    async def close(self) -> None:
        """Close the websocket and any owned HTTP session."""

        if self._reader_task is not None:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
            self._reader_task = None

        if self._ws is not None:
            with contextlib.suppress(Exception):
                await self._ws.close()
            self._ws = None

        self._fail_pending(WebOSConnectionError("Session closed"))

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _register(self) -> None:
        payload: dict[str, Any] = {
            "forcePairing": False,
            "pairingType": "PROMPT",
            "manifest": self._manifest,
        }
        if self._client_key:
            payload["client-key"] = self._client_key

        reply = await self._send_and_wait(
            REGISTER_ID, {"type": "register", "id": REGISTER_ID, "payload": payload}
        )

        if reply.get("type") == "error":
            raise WebOSError(
                f"Registration refused: {reply.get('error') or 'unknown error'}"
            )

        key = (reply.get("payload") or {}).get("client-key")
        if isinstance(key, str) and key:
            self._client_key = key
        LOGGER.info("Registered with television at %s", self.url)

    async def _send_and_wait(
        self, message_id: str, message: Mapping[str, Any]
    ) -> dict[str, Any]:
        ws = self._ws
        if ws is None or ws.closed:
            raise WebOSConnectionError("Websocket is not connected")

        future: asyncio.Future[dict[str, Any]] = (
            asyncio.get_running_loop().create_future()
        )
        self._pending[message_id] = future
        try:
            FRAME_LOGGER.debug(">> %s", message)
            try:
                await ws.send_json(message)
            except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
                raise WebOSConnectionError(f"Send failed: {exc}") from exc
            return await future
        finally:
            self._pending.pop(message_id, None)

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        error: WebOSConnectionError = WebOSConnectionError("Websocket closed")
        try:
            async for message in ws:
                if message.type == aiohttp.WSMsgType.TEXT:
                    self._dispatch(message.data)
                elif message.type == aiohttp.WSMsgType.ERROR:
                    error = WebOSConnectionError(
                        f"Websocket error: {ws.exception() or 'unknown'}"
                    )
                    break
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = WebOSConnectionError(f"Websocket read failed: {exc}")

        LOGGER.debug("Websocket to %s closed", self.url)
        self._fail_pending(error)

    def _dispatch(self, raw_data: str) -> None:
        FRAME_LOGGER.debug("<< %s", raw_data)
        try:
            message = json.loads(raw_data)
        except json.JSONDecodeError:
            return  # Discard non-JSON frames
        if not isinstance(message, dict):
            return

        message_id = message.get("id")
        future = self._pending.get(message_id) if isinstance(message_id, str) else None
        if future is None or future.done():
            return

        if message_id == REGISTER_ID and message.get("type") == "response":
            payload = message.get("payload") or {}
            if payload.get("pairingType") == "PROMPT":
                LOGGER.info("Accept the pairing prompt on the television")
            return

        future.set_result(message)

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)


class WebOSConnector:
    """Creates registered :class:`WebOSClient` sessions for the supervisor."""

    def __init__(
        self,
        *,
        port: int = DEFAULT_TV_PORT,
        request_timeout: float = 5.0,
        register_timeout: float = 60.0,
    ) -> None:
        self.port = port
        self.request_timeout = request_timeout
        self.register_timeout = register_timeout

    async def connect(self, address: str, client_key: Optional[str]) -> WebOSClient:
        client = WebOSClient(
            build_url(address, self.port),
            client_key=client_key,
            request_timeout=self.request_timeout,
            register_timeout=self.register_timeout,
        )
        try:
            await client.connect()
        except BaseException:
            await client.close()
            raise
        return client

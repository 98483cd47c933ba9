"""Connection supervision for the television session.

The supervisor owns the only session to the television. It resolves the
television's address, connects, dispatches queued commands against the
session and falls back to reconnecting whenever a read request fails.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from .adapters.channel import END_OF_STREAM, QueueItem
from .commands import CommandDispatcher, SessionProbeError, is_audio_command
from .config import ResilienceConfig
from .core import (
    AddressResolver,
    AudioGate,
    CredentialStore,
    SessionConnector,
    TelevisionSession,
)

LOGGER = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Current state of the television session."""

    DISCONNECTED = "disconnected"
    """No session; address resolution and connect are retried on a timer."""

    CONNECTED = "connected"
    """A registered session is available for commands."""


@dataclass(slots=True)
class Disconnected:
    reason: str = "startup"


@dataclass(slots=True)
class Connected:
    session: TelevisionSession
    address: str


SupervisorState = Union[Disconnected, Connected]
StateCallback = Callable[[ConnectionState, Optional[str]], Any]


class ConnectionSupervisor:
    """Drives the Disconnected/Connected state machine.

    Key responsibilities:
    - Resolve the address and (re)connect while disconnected
    - Persist a changed pairing key after each successful connect
    - Drain the command queue one item at a time, in order
    - Suppress audio commands while the television is not the audio output
    - Drop the session when the volume probe fails
    """

    def __init__(
        self,
        *,
        queue: asyncio.Queue[QueueItem],
        resolver: AddressResolver,
        connector: SessionConnector,
        audio_gate: AudioGate,
        key_store: CredentialStore,
        resilience_config: Optional[ResilienceConfig] = None,
        dispatcher: Optional[CommandDispatcher] = None,
    ) -> None:
        self._queue = queue
        self._resolver = resolver
        self._connector = connector
        self._audio_gate = audio_gate
        self._key_store = key_store
        self._resilience = resilience_config or ResilienceConfig()
        self._dispatcher = dispatcher or CommandDispatcher()

        self._state: SupervisorState = Disconnected()
        self._cached_key: Optional[str] = None
        self._state_callbacks: list[StateCallback] = []

    @property
    def state(self) -> ConnectionState:
        if isinstance(self._state, Connected):
            return ConnectionState.CONNECTED
        return ConnectionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def detail(self) -> str:
        """Address while connected, otherwise the reason for being disconnected."""
        if isinstance(self._state, Connected):
            return self._state.address
        return self._state.reason

    def register_state_callback(self, callback: StateCallback) -> None:
        """Register a callback invoked with ``(state, detail)`` on every transition."""
        self._state_callbacks.append(callback)

    async def run(self) -> None:
        """Process commands until the command queue reports end-of-stream."""

        LOGGER.info("Connection supervisor started")
        try:
            while True:
                if isinstance(self._state, Disconnected):
                    await self._attempt_connect()

                item = await self._next_item()
                if item is None:
                    continue
                if item is END_OF_STREAM:
                    LOGGER.info("Command queue closed, stopping supervisor")
                    break

                await self._handle_command(item)
        finally:
            await self._drop_session("supervisor stopped", notify=False)

    # ------------------------------------------------------------------
    # Disconnected
    # ------------------------------------------------------------------
    async def _attempt_connect(self) -> None:
        try:
            address = await self._resolver.resolve()
            if address is None:
                LOGGER.debug("Television address unresolved")
                return
            self._cached_key = self._key_store.load()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.warning("Unable to prepare television connection: %s", exc)
            return

        try:
            session = await self._connector.connect(address, self._cached_key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.warning("Connection to television at %s failed: %s", address, exc)
            return

        self._persist_key(session.client_key)
        LOGGER.info("Connected to television at %s", address)
        await self._transition(Connected(session=session, address=address), address)

    def _persist_key(self, key: Optional[str]) -> None:
        if not key:
            return
        value = key.strip()
        if not value or value == self._cached_key:
            return

        try:
            self._key_store.save(value)
        except OSError as exc:
            LOGGER.warning("Failed to store television client key: %s", exc)
            return
        self._cached_key = value

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def _next_item(self) -> Optional[QueueItem]:
        if isinstance(self._state, Connected):
            wait_seconds = self._resilience.connected_wait_seconds
        else:
            wait_seconds = self._resilience.resolve_retry_seconds

        try:
            async with asyncio.timeout(wait_seconds):
                return await self._queue.get()
        except asyncio.TimeoutError:
            return None

    async def _handle_command(self, command: str) -> None:
        state = self._state
        if not isinstance(state, Connected):
            LOGGER.debug("Discarding %r while disconnected", command)
            return

        if is_audio_command(command) and not await self._audio_gate.is_active():
            LOGGER.debug("Television is not the audio output; ignoring %r", command)
            return

        try:
            await self._dispatcher.dispatch(state.session, command)
        except SessionProbeError as exc:
            LOGGER.warning("Television session lost: %s", exc)
            await self._drop_session(str(exc))

    async def _drop_session(self, reason: str, *, notify: bool = True) -> None:
        state = self._state
        if not isinstance(state, Connected):
            return

        self._state = Disconnected(reason=reason)
        try:
            await state.session.close()
        except Exception:
            pass  # Session is being discarded - ignore errors

        if notify:
            await self._notify(ConnectionState.DISCONNECTED, reason)

    async def _transition(self, new_state: SupervisorState, detail: Optional[str]) -> None:
        self._state = new_state
        await self._notify(self.state, detail)

    async def _notify(self, state: ConnectionState, detail: Optional[str]) -> None:
        for callback in self._state_callbacks:
            try:
                result = callback(state, detail)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                LOGGER.warning("State callback failed", exc_info=True)

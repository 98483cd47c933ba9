"""Main application entry-point for webos-relay."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterable, Optional

from .adapters import (
    ArpAddressResolver,
    AudioOutputGate,
    CommandIntake,
    FifoCommandSource,
    WebOSConnector,
    ensure_fifo,
)
from .adapters.channel import QueueItem
from .config import RelayConfig, load_config
from .connection import ConnectionSupervisor
from .core import AddressResolver, AudioGate, CredentialStore, SessionConnector
from .credentials import ClientKeyStore
from .health import HealthReporter, HealthServer
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)


class RelayApp:
    """Wires the command pipe, the collaborators and the supervisor together.

    Every collaborator can be injected for testing; the defaults talk to the
    real named pipe, ``arp``, the audio helper and the television.
    """

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        *,
        source: Optional[AsyncIterable[str]] = None,
        resolver: Optional[AddressResolver] = None,
        connector: Optional[SessionConnector] = None,
        audio_gate: Optional[AudioGate] = None,
        key_store: Optional[CredentialStore] = None,
    ) -> None:
        self._config = config or load_config()
        cfg = self._config

        self._uses_fifo = source is None
        self._source: AsyncIterable[str] = source or FifoCommandSource(
            cfg.channel.pipe_path,
            retry_seconds=cfg.resilience.channel_retry_seconds,
        )
        self._resolver = resolver or ArpAddressResolver(cfg.television.mac_address)
        self._connector = connector or WebOSConnector(
            port=cfg.television.port,
            request_timeout=cfg.television.request_timeout_seconds,
            register_timeout=cfg.television.register_timeout_seconds,
        )
        self._audio_gate = audio_gate or AudioOutputGate(
            cfg.audio.device_name,
            helper=cfg.audio.helper,
            timeout=cfg.audio.helper_timeout_seconds,
        )
        self._key_store = key_store or ClientKeyStore(cfg.storage.client_key_path)
        self._health = HealthReporter()
        self._health_server: Optional[HealthServer] = None

    @property
    def health(self) -> HealthReporter:
        return self._health

    async def run(self) -> None:
        """Run until the command source is exhausted."""

        cfg = self._config
        LOGGER.info("webos-relay starting with config: %s", cfg.path)

        if self._uses_fifo:
            try:
                ensure_fifo(cfg.channel.pipe_path)
            except OSError as exc:
                # The source keeps retrying until the pipe appears.
                LOGGER.error(
                    "Unable to create command pipe %s: %s", cfg.channel.pipe_path, exc
                )

        queue: asyncio.Queue[QueueItem] = asyncio.Queue(maxsize=cfg.channel.queue_size)
        intake = CommandIntake(self._source, queue)
        supervisor = ConnectionSupervisor(
            queue=queue,
            resolver=self._resolver,
            connector=self._connector,
            audio_gate=self._audio_gate,
            key_store=self._key_store,
            resilience_config=cfg.resilience,
        )
        supervisor.register_state_callback(self._health.on_connection_state)
        await self._health.on_connection_state(supervisor.state, supervisor.detail)

        await self._start_health_server()
        intake.start()
        try:
            await supervisor.run()
        except asyncio.CancelledError:
            LOGGER.info("webos-relay received shutdown signal")
            raise
        finally:
            await intake.stop()
            await self._stop_health_server()
            LOGGER.info("webos-relay stopped")

    @classmethod
    def start(cls, config: Optional[RelayConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_network=instance._config.logging.log_network,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("webos-relay received shutdown signal")

    async def _start_health_server(self) -> None:
        resilience = self._config.resilience
        if not resilience.health_enabled:
            return

        server = HealthServer(
            self._health, resilience.health_host, resilience.health_port
        )
        try:
            await server.start()
        except OSError as exc:
            LOGGER.warning("Health endpoint unavailable: %s", exc)
            return
        self._health_server = server

    async def _stop_health_server(self) -> None:
        if self._health_server is not None:
            await self._health_server.stop()
            self._health_server = None

"""End-to-end tests for RelayApp with injected collaborators."""

import asyncio
from pathlib import Path
from typing import Optional

import pytest

from webos_relay.app import RelayApp
from webos_relay.cli import main
from webos_relay.config import load_config
from webos_relay.core import WebOSCommand, WebOSResponse


class _Session:
    def __init__(self, calls: list, volume: int) -> None:
        self.calls = calls
        self.volume = volume
        self.client_key = "issued-key"
        self.closed = False

    async def request(self, command: WebOSCommand) -> WebOSResponse:
        self.calls.append(command)
        return WebOSResponse(
            type="response", payload={"volumeStatus": {"volume": self.volume}}
        )

    async def close(self) -> None:
        self.closed = True


class _Connector:
    def __init__(self, volume: int = 50) -> None:
        self.calls: list = []
        self.volume = volume
        self.sessions: list[_Session] = []

    async def connect(self, address: str, client_key: Optional[str]) -> _Session:
        session = _Session(self.calls, self.volume)
        self.sessions.append(session)
        return session


class _Resolver:
    async def resolve(self) -> Optional[str]:
        return "10.0.0.42"


class _Gate:
    def __init__(self, active: bool) -> None:
        self.active = active

    async def is_active(self) -> bool:
        return self.active


async def _lines(*items):
    for item in items:
        yield item


def _config(tmp_path: Path):
    config = load_config(tmp_path / "webos-relay.cfg")
    config.storage.client_key_path = tmp_path / ".lgtv_key"
    config.resilience.resolve_retry_seconds = 0.01
    return config


def _app(tmp_path: Path, *lines, active: bool = True, connector=None) -> RelayApp:
    return RelayApp(
        _config(tmp_path),
        source=_lines(*lines),
        resolver=_Resolver(),
        connector=connector or _Connector(),
        audio_gate=_Gate(active),
    )


@pytest.mark.asyncio
async def test_volume_up_line_sets_incremented_volume(tmp_path: Path):
    connector = _Connector(volume=50)
    app = _app(tmp_path, "volume_up\n", connector=connector)

    await asyncio.wait_for(app.run(), timeout=2.0)

    set_volume = [c for c in connector.calls if c.uri == "ssap://audio/setVolume"]
    assert set_volume == [WebOSCommand.set_volume(51)]
    assert connector.sessions[0].closed is True


@pytest.mark.asyncio
async def test_mute_line_is_ignored_when_gate_inactive(tmp_path: Path):
    connector = _Connector()
    app = _app(tmp_path, "mute\n", active=False, connector=connector)

    await asyncio.wait_for(app.run(), timeout=2.0)

    assert connector.calls == []


@pytest.mark.asyncio
async def test_new_pairing_key_is_stored(tmp_path: Path):
    app = _app(tmp_path)

    await asyncio.wait_for(app.run(), timeout=2.0)

    assert (tmp_path / ".lgtv_key").read_text(encoding="utf-8") == "issued-key"


@pytest.mark.asyncio
async def test_health_tracks_connection(tmp_path: Path):
    app = _app(tmp_path, "unmute\n")

    await asyncio.wait_for(app.run(), timeout=2.0)
    snapshot = await app.health.snapshot()

    assert snapshot["status"] == "ok"
    assert snapshot["components"][0]["name"] == "television"


def test_cli_show_config_prints_sections(tmp_path: Path, capsys) -> None:
    config_path = tmp_path / "webos-relay.cfg"
    config_path.write_text("[audio]\ndevice_name = Den TV\n", encoding="utf-8")

    assert main(["-c", str(config_path), "show-config"]) == 0

    output = capsys.readouterr().out
    assert f"Configuration loaded from {config_path}" in output
    assert "[television]" in output
    assert "device_name = Den TV" in output

"""Tests for command classification and dispatch."""

from typing import Optional

import pytest

from webos_relay.commands import (
    AUDIO_COMMANDS,
    CommandDispatcher,
    SessionProbeError,
    clamp_volume,
    is_audio_command,
)
from webos_relay.core import WebOSCommand, WebOSResponse


class RecordingSession:
    """Session stub that records every request."""

    def __init__(
        self,
        *,
        volume: Optional[int] = 50,
        fail_probe: bool = False,
        fail_writes: bool = False,
    ) -> None:
        self.volume = volume
        self.fail_probe = fail_probe
        self.fail_writes = fail_writes
        self.requests: list[WebOSCommand] = []
        self.client_key = None

    async def request(self, command: WebOSCommand) -> WebOSResponse:
        self.requests.append(command)
        if command.uri == "ssap://audio/getVolume":
            if self.fail_probe:
                raise ConnectionError("socket closed")
            payload = {} if self.volume is None else {"volumeStatus": {"volume": self.volume}}
            return WebOSResponse(type="response", payload=payload)
        if self.fail_writes:
            raise ConnectionError("socket closed")
        return WebOSResponse(type="response", payload={"returnValue": True})

    async def close(self) -> None:
        pass


def test_audio_commands_are_gated() -> None:
    assert AUDIO_COMMANDS == {"volume_up", "volume_down", "mute", "unmute"}
    assert is_audio_command("volume_up")
    assert not is_audio_command("power_off")
    assert not is_audio_command("volume")


@pytest.mark.parametrize(
    ("value", "expected"), [(-1, 0), (0, 0), (51, 51), (100, 100), (101, 100)]
)
def test_clamp_volume(value: int, expected: int) -> None:
    assert clamp_volume(value) == expected


@pytest.mark.asyncio
async def test_volume_up_reads_then_sets_next_level():
    session = RecordingSession(volume=50)

    await CommandDispatcher().dispatch(session, "volume_up")

    assert session.requests == [
        WebOSCommand.get_volume(),
        WebOSCommand.set_volume(51),
    ]


@pytest.mark.asyncio
async def test_volume_down_reads_then_sets_previous_level():
    session = RecordingSession(volume=50)

    await CommandDispatcher().dispatch(session, "volume_down")

    assert session.requests[-1] == WebOSCommand.set_volume(49)


@pytest.mark.asyncio
async def test_volume_stays_within_bounds():
    dispatcher = CommandDispatcher()
    at_max = RecordingSession(volume=100)
    at_min = RecordingSession(volume=0)

    await dispatcher.dispatch(at_max, "volume_up")
    await dispatcher.dispatch(at_min, "volume_down")

    assert at_max.requests[-1] == WebOSCommand.set_volume(100)
    assert at_min.requests[-1] == WebOSCommand.set_volume(0)


@pytest.mark.asyncio
async def test_failed_volume_query_raises_probe_error():
    session = RecordingSession(fail_probe=True)

    with pytest.raises(SessionProbeError) as excinfo:
        await CommandDispatcher().dispatch(session, "volume_up")

    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert session.requests == [WebOSCommand.get_volume()]


@pytest.mark.asyncio
async def test_failed_set_volume_is_swallowed():
    session = RecordingSession(volume=10, fail_writes=True)

    await CommandDispatcher().dispatch(session, "volume_down")

    assert session.requests == [
        WebOSCommand.get_volume(),
        WebOSCommand.set_volume(9),
    ]


@pytest.mark.asyncio
async def test_missing_volume_level_skips_set_volume():
    session = RecordingSession(volume=None)

    await CommandDispatcher().dispatch(session, "volume_up")

    assert session.requests == [WebOSCommand.get_volume()]


@pytest.mark.asyncio
@pytest.mark.parametrize(("command", "muted"), [("mute", True), ("unmute", False)])
async def test_mute_commands_send_set_mute(command: str, muted: bool):
    session = RecordingSession()

    await CommandDispatcher().dispatch(session, command)

    assert session.requests == [WebOSCommand.set_mute(muted)]


@pytest.mark.asyncio
async def test_mute_failure_is_swallowed():
    session = RecordingSession(fail_writes=True)

    await CommandDispatcher().dispatch(session, "mute")

    assert session.requests == [WebOSCommand.set_mute(True)]


@pytest.mark.asyncio
async def test_unknown_command_is_a_no_op():
    session = RecordingSession()

    await CommandDispatcher().dispatch(session, "input_hdmi2")

    assert session.requests == []


def test_set_volume_rejects_out_of_range_levels() -> None:
    with pytest.raises(ValueError):
        WebOSCommand.set_volume(101)
    with pytest.raises(ValueError):
        WebOSCommand.set_volume(-1)


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"volumeStatus": {"volume": 17}}, 17),
        ({"volume": 8, "muted": False}, 8),
        ({"volumeStatus": {"volume": True}}, None),
        ({"returnValue": True}, None),
        (None, None),
    ],
)
def test_response_volume_extraction(payload, expected) -> None:
    assert WebOSResponse(type="response", payload=payload).volume == expected

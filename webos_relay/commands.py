"""Translation of pipe commands into webOS requests."""

from __future__ import annotations

import logging
from typing import Optional

from .core import VOLUME_MAX, VOLUME_MIN, TelevisionSession, WebOSCommand

LOGGER = logging.getLogger(__name__)


class CommandNames:
    """Command tokens accepted on the command pipe."""

    VOLUME_UP = "volume_up"
    VOLUME_DOWN = "volume_down"
    MUTE = "mute"
    UNMUTE = "unmute"


AUDIO_COMMANDS = frozenset(
    {
        CommandNames.VOLUME_UP,
        CommandNames.VOLUME_DOWN,
        CommandNames.MUTE,
        CommandNames.UNMUTE,
    }
)
"""Commands that only apply while the television is the active audio output."""

_VOLUME_STEPS = {
    CommandNames.VOLUME_UP: 1,
    CommandNames.VOLUME_DOWN: -1,
}

_MUTE_STATES = {
    CommandNames.MUTE: True,
    CommandNames.UNMUTE: False,
}


class SessionProbeError(RuntimeError):
    """Raised when a read request fails and the session must be discarded."""


def is_audio_command(command: str) -> bool:
    return command in AUDIO_COMMANDS


def clamp_volume(value: int) -> int:
    return max(VOLUME_MIN, min(VOLUME_MAX, value))


class CommandDispatcher:
    """Executes one command against a live session.

    Only the volume query may signal failure (as :class:`SessionProbeError`).
    Write-only requests are fire-and-forget: their failures are logged and
    the session is kept.
    """

    async def dispatch(self, session: TelevisionSession, command: str) -> None:
        step = _VOLUME_STEPS.get(command)
        if step is not None:
            await self._step_volume(session, step)
            return

        muted = _MUTE_STATES.get(command)
        if muted is not None:
            await self._send_write(session, WebOSCommand.set_mute(muted))
            return

        LOGGER.debug("Ignoring unrecognised command %r", command)

    async def _step_volume(self, session: TelevisionSession, step: int) -> None:
        current = await self._probe_volume(session)
        if current is None:
            LOGGER.warning("Volume response carried no volume level")
            return

        target = clamp_volume(current + step)
        LOGGER.debug("Volume %d -> %d", current, target)
        await self._send_write(session, WebOSCommand.set_volume(target))

    async def _probe_volume(self, session: TelevisionSession) -> Optional[int]:
        try:
            response = await session.request(WebOSCommand.get_volume())
        except Exception as exc:
            raise SessionProbeError(f"Volume query failed: {exc}") from exc
        return response.volume

    async def _send_write(
        self, session: TelevisionSession, command: WebOSCommand
    ) -> None:
        try:
            await session.request(command)
        except Exception as exc:
            LOGGER.warning("Request %s failed: %s", command.uri, exc)

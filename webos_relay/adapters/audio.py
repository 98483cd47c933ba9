"""Ask an external helper which audio output the host is using."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from ..constants import DEFAULT_AUDIO_HELPER

LOGGER = logging.getLogger(__name__)


def default_search_paths() -> list[Path]:
    return [Path.home() / ".local" / "bin", Path.cwd()]


class AudioOutputGate:
    """Reports whether the television is the active audio sink.

    The helper prints the name of the current default output device. When
    the helper cannot be found or run, the gate reports inactive so volume
    commands are left to the operating system.
    """

    def __init__(
        self,
        device_name: str,
        *,
        helper: str = DEFAULT_AUDIO_HELPER,
        search_paths: Optional[Sequence[Path]] = None,
        timeout: float = 2.0,
    ) -> None:
        self.device_name = device_name
        self.helper = helper
        self._search_paths = list(search_paths) if search_paths is not None else None
        self._timeout = timeout

    def locate_helper(self) -> Optional[Path]:
        paths = (
            self._search_paths
            if self._search_paths is not None
            else default_search_paths()
        )
        for directory in paths:
            candidate = directory / self.helper
            if candidate.is_file():
                return candidate
        return None

    async def current_device(self) -> Optional[str]:
        helper_path = self.locate_helper()
        if helper_path is None:
            LOGGER.debug("Audio helper %s not found", self.helper)
            return None

        try:
            proc = await asyncio.create_subprocess_exec(
                os.fspath(helper_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            LOGGER.warning("Unable to run audio helper %s: %s", helper_path, exc)
            return None

        try:
            async with asyncio.timeout(self._timeout):
                stdout, _ = await proc.communicate()
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Audio helper %s timed out after %.1fs", helper_path, self._timeout
            )
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            return None

        return stdout.decode("utf-8", errors="replace").strip()

    async def is_active(self) -> bool:
        name = await self.current_device()
        if name is None:
            return False
        return name.casefold() == self.device_name.casefold()

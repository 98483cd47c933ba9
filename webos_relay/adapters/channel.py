"""Command intake from a named pipe into the supervisor's queue."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import stat
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional, Union

from ..constants import DEFAULT_PIPE_PATH

LOGGER = logging.getLogger(__name__)

PIPE_MODE = 0o666


class _EndOfStream:
    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM = _EndOfStream()
"""Queued after the last command once the source is exhausted."""

QueueItem = Union[str, _EndOfStream]


def ensure_fifo(path: Path = DEFAULT_PIPE_PATH) -> None:
    """Create the named pipe at ``path`` with world read/write permissions.

    An existing path is left untouched.
    """

    if path.exists():
        if not stat.S_ISFIFO(path.stat().st_mode):
            LOGGER.warning("%s exists but is not a named pipe", path)
        return

    os.mkfifo(path, PIPE_MODE)
    # mkfifo honours the umask, so apply the mode explicitly.
    os.chmod(path, PIPE_MODE)
    LOGGER.info("Created command pipe at %s", path)


class FifoCommandSource:
    """Yields lines written to a named pipe, reopening it after errors.

    The pipe is opened read+write so the reader always holds a writer end
    and never sees end-of-file while no producer is attached.
    """

    def __init__(
        self, path: Path = DEFAULT_PIPE_PATH, *, retry_seconds: float = 1.0
    ) -> None:
        self.path = path
        self.retry_seconds = retry_seconds

    def __aiter__(self) -> AsyncIterator[str]:
        return self.lines()

    async def lines(self) -> AsyncIterator[str]:
        loop = asyncio.get_running_loop()

        while True:
            transport: Optional[asyncio.BaseTransport] = None
            try:
                fd = os.open(self.path, os.O_RDWR | os.O_NONBLOCK)
                pipe = os.fdopen(fd, "rb", buffering=0)
                reader = asyncio.StreamReader()
                try:
                    transport, _ = await loop.connect_read_pipe(
                        lambda: asyncio.StreamReaderProtocol(reader), pipe
                    )
                except BaseException:
                    pipe.close()
                    raise

                LOGGER.debug("Listening for commands on %s", self.path)
                while True:
                    try:
                        raw = await reader.readline()
                    except ValueError as exc:
                        # readline has already dropped the oversized chunk.
                        LOGGER.warning("Discarding overlong command line: %s", exc)
                        continue
                    if not raw:
                        break
                    yield raw.decode("utf-8", errors="replace")
            except OSError as exc:
                LOGGER.warning(
                    "Command pipe %s unavailable: %s, retrying in %.1fs",
                    self.path,
                    exc,
                    self.retry_seconds,
                )
                await asyncio.sleep(self.retry_seconds)
            finally:
                if transport is not None:
                    transport.close()


class CommandIntake:
    """Feeds trimmed, non-empty lines from a source into a bounded queue.

    ``queue.put`` blocks the intake, never the consumer, when the queue is
    full. Once the source is exhausted :data:`END_OF_STREAM` is enqueued.
    """

    def __init__(
        self,
        source: AsyncIterable[str],
        queue: asyncio.Queue[QueueItem],
    ) -> None:
        self._source = source
        self._queue = queue
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            LOGGER.warning("Command intake already running")
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        try:
            async for line in self._source:
                command = line.strip()
                if not command:
                    continue
                await self._queue.put(command)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Command source failed; closing the command queue")

        LOGGER.info("Command source exhausted")
        await self._queue.put(END_OF_STREAM)

"""Logging configuration helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Raw SSAP frames (pairing key included) and aiohttp's websocket chatter.
NETWORK_LOGGERS = (
    "webos_relay.adapters.webos.frames",
    "aiohttp.client",
    "aiohttp.websocket",
)


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Configure root logging for the relay daemon.

    Parameters
    ----------
    level:
        Log level name, e.g. "INFO" or "DEBUG".
    log_path:
        Optional file that receives the same records as the console.
    log_network:
        When true, frames exchanged with the television are logged at the
        requested level; otherwise they are held back at WARNING.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    network_level = logging.NOTSET if log_network else logging.WARNING
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

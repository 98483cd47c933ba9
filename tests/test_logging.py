import logging
from pathlib import Path

import pytest

from webos_relay.logging import NETWORK_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


def test_frame_logging_is_held_back_by_default() -> None:
    configure_logging("DEBUG")

    frames = logging.getLogger("webos_relay.adapters.webos.frames")
    assert logging.getLogger().level == logging.DEBUG
    assert not frames.isEnabledFor(logging.DEBUG)
    assert logging.getLogger("webos_relay.adapters.webos").isEnabledFor(logging.DEBUG)


def test_log_network_enables_frame_logging() -> None:
    configure_logging("DEBUG")
    configure_logging("DEBUG", log_network=True)

    frames = logging.getLogger("webos_relay.adapters.webos.frames")
    assert frames.isEnabledFor(logging.DEBUG)
    assert logging.getLogger("aiohttp.websocket").isEnabledFor(logging.DEBUG)


def test_log_path_adds_file_handler(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "webos-relay.log"

    configure_logging("INFO", log_path=log_path)
    logging.getLogger("webos_relay.connection").info("Connected to television")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_path.read_text(encoding="utf-8")
    assert "| INFO | webos_relay.connection | Connected to television" in content

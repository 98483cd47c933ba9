"""Constants used across the webos-relay package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "webos-relay"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME
DEFAULT_CLIENT_KEY_PATH = Path.home() / ".lgtv_key"

DEFAULT_PIPE_PATH = Path("/tmp/lgtv-pipe")
DEFAULT_QUEUE_SIZE = 32

# MAC address of the television and the name CoreAudio reports for it as a sink.
DEFAULT_TV_MAC_ADDRESS = "3C:F0:83:9E:6A:2C"
DEFAULT_TV_PORT = 3000
DEFAULT_AUDIO_DEVICE_NAME = "LG Monitor"
DEFAULT_AUDIO_HELPER = "get_audio_device"

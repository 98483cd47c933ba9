"""Configuration loader for webos-relay."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class TelevisionConfig:
    mac_address: str = constants.DEFAULT_TV_MAC_ADDRESS
    port: int = constants.DEFAULT_TV_PORT
    request_timeout_seconds: float = 5.0
    register_timeout_seconds: float = 60.0  # Long enough to accept the pairing prompt


@dataclass(slots=True)
class AudioConfig:
    device_name: str = constants.DEFAULT_AUDIO_DEVICE_NAME
    helper: str = constants.DEFAULT_AUDIO_HELPER
    helper_timeout_seconds: float = 2.0


@dataclass(slots=True)
class ChannelConfig:
    pipe_path: Path = constants.DEFAULT_PIPE_PATH
    queue_size: int = constants.DEFAULT_QUEUE_SIZE


@dataclass(slots=True)
class StorageConfig:
    client_key_path: Path = constants.DEFAULT_CLIENT_KEY_PATH


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class ResilienceConfig:
    resolve_retry_seconds: float = 5.0
    connected_wait_seconds: float = 3600.0
    channel_retry_seconds: float = 1.0
    health_enabled: bool = False
    health_host: str = "127.0.0.1"
    health_port: int = 0


@dataclass(slots=True)
class RelayConfig:
    television: TelevisionConfig
    audio: AudioConfig
    channel: ChannelConfig
    storage: StorageConfig
    logging: LoggingConfig
    resilience: ResilienceConfig
    raw: ConfigParser
    path: Path


def _get_float(parser: ConfigParser, section: str, option: str, default: float) -> float:
    try:
        return parser.getfloat(section, option, fallback=default)
    except ValueError:
        return default


def _get_int(parser: ConfigParser, section: str, option: str, default: int) -> int:
    try:
        return parser.getint(section, option, fallback=default)
    except ValueError:
        return default


def load_config(path: Optional[Path] = None) -> RelayConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "television": {
                "mac_address": constants.DEFAULT_TV_MAC_ADDRESS,
                "port": str(constants.DEFAULT_TV_PORT),
                "request_timeout_seconds": "5.0",
                "register_timeout_seconds": "60.0",
            },
            "audio": {
                "device_name": constants.DEFAULT_AUDIO_DEVICE_NAME,
                "helper": constants.DEFAULT_AUDIO_HELPER,
                "helper_timeout_seconds": "2.0",
            },
            "channel": {
                "pipe_path": str(constants.DEFAULT_PIPE_PATH),
                "queue_size": str(constants.DEFAULT_QUEUE_SIZE),
            },
            "storage": {
                "client_key_path": str(constants.DEFAULT_CLIENT_KEY_PATH),
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
            "resilience": {
                "resolve_retry_seconds": "5.0",
                "connected_wait_seconds": "3600.0",
                "channel_retry_seconds": "1.0",
                "health_enabled": "false",
                "health_host": "127.0.0.1",
                "health_port": "0",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    tv_defaults = TelevisionConfig()
    television = TelevisionConfig(
        mac_address=parser.get("television", "mac_address").strip(),
        port=_get_int(parser, "television", "port", tv_defaults.port),
        request_timeout_seconds=max(
            0.1,
            _get_float(
                parser,
                "television",
                "request_timeout_seconds",
                tv_defaults.request_timeout_seconds,
            ),
        ),
        register_timeout_seconds=max(
            0.1,
            _get_float(
                parser,
                "television",
                "register_timeout_seconds",
                tv_defaults.register_timeout_seconds,
            ),
        ),
    )

    audio = AudioConfig(
        device_name=parser.get("audio", "device_name").strip(),
        helper=parser.get("audio", "helper").strip(),
        helper_timeout_seconds=max(
            0.1,
            _get_float(
                parser,
                "audio",
                "helper_timeout_seconds",
                AudioConfig().helper_timeout_seconds,
            ),
        ),
    )

    channel = ChannelConfig(
        pipe_path=Path(parser.get("channel", "pipe_path")).expanduser(),
        queue_size=max(
            1,
            _get_int(parser, "channel", "queue_size", constants.DEFAULT_QUEUE_SIZE),
        ),
    )

    storage = StorageConfig(
        client_key_path=Path(parser.get("storage", "client_key_path")).expanduser(),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    resilience_defaults = ResilienceConfig()
    resilience = ResilienceConfig(
        resolve_retry_seconds=max(
            0.0,
            _get_float(
                parser,
                "resilience",
                "resolve_retry_seconds",
                resilience_defaults.resolve_retry_seconds,
            ),
        ),
        connected_wait_seconds=max(
            0.0,
            _get_float(
                parser,
                "resilience",
                "connected_wait_seconds",
                resilience_defaults.connected_wait_seconds,
            ),
        ),
        channel_retry_seconds=max(
            0.0,
            _get_float(
                parser,
                "resilience",
                "channel_retry_seconds",
                resilience_defaults.channel_retry_seconds,
            ),
        ),
        health_enabled=parser.getboolean(
            "resilience", "health_enabled", fallback=False
        ),
        health_host=parser.get("resilience", "health_host", fallback="127.0.0.1"),
        health_port=_get_int(parser, "resilience", "health_port", 0),
    )

    return RelayConfig(
        television=television,
        audio=audio,
        channel=channel,
        storage=storage,
        logging=logging_config,
        resilience=resilience,
        raw=parser,
        path=config_path,
    )

"""Adapter modules for external integrations."""

from .audio import AudioOutputGate
from .channel import (
    END_OF_STREAM,
    CommandIntake,
    FifoCommandSource,
    ensure_fifo,
)
from .neighbors import ArpAddressResolver, find_address
from .webos import WebOSClient, WebOSConnectionError, WebOSConnector, WebOSError

__all__ = [
    "ArpAddressResolver",
    "AudioOutputGate",
    "CommandIntake",
    "END_OF_STREAM",
    "FifoCommandSource",
    "WebOSClient",
    "WebOSConnectionError",
    "WebOSConnector",
    "WebOSError",
    "ensure_fifo",
    "find_address",
]

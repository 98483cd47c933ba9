"""Core primitives for webos-relay."""

from .models import VOLUME_MAX, VOLUME_MIN, WebOSCommand, WebOSResponse
from .protocols import (
    AddressResolver,
    AudioGate,
    CredentialStore,
    SessionConnector,
    TelevisionSession,
)

__all__ = [
    "AddressResolver",
    "AudioGate",
    "CredentialStore",
    "SessionConnector",
    "TelevisionSession",
    "VOLUME_MAX",
    "VOLUME_MIN",
    "WebOSCommand",
    "WebOSResponse",
]

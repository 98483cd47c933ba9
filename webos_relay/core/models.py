"""Domain models for webOS requests and responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

VOLUME_MIN = 0
VOLUME_MAX = 100


@dataclass(frozen=True, slots=True)
class WebOSCommand:
    """A typed SSAP request addressed by its ``ssap://`` URI."""

    uri: str
    payload: Optional[Mapping[str, Any]] = None

    @classmethod
    def get_volume(cls) -> "WebOSCommand":
        return cls("ssap://audio/getVolume")

    @classmethod
    def set_volume(cls, level: int) -> "WebOSCommand":
        if not VOLUME_MIN <= level <= VOLUME_MAX:
            raise ValueError(
                f"Volume must be between {VOLUME_MIN} and {VOLUME_MAX}, got {level}"
            )
        return cls("ssap://audio/setVolume", {"volume": level})

    @classmethod
    def set_mute(cls, muted: bool) -> "WebOSCommand":
        return cls("ssap://audio/setMute", {"mute": muted})


@dataclass(slots=True)
class WebOSResponse:
    type: str
    id: Optional[str] = None
    payload: Optional[dict[str, Any]] = None

    @classmethod
    def from_message(cls, message: Mapping[str, Any]) -> "WebOSResponse":
        payload = message.get("payload")
        return cls(
            type=str(message.get("type", "")),
            id=message.get("id"),
            payload=payload if isinstance(payload, dict) else None,
        )

    @property
    def volume(self) -> Optional[int]:
        """Current volume reported by ``getVolume``, if present.

        Newer firmware nests it under ``volumeStatus``; older sets report it
        at the top level of the payload.
        """

        if not self.payload:
            return None

        status = self.payload.get("volumeStatus")
        value = status.get("volume") if isinstance(status, dict) else None
        if value is None:
            value = self.payload.get("volume")

        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

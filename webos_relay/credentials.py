"""Persistence of the television pairing key."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_CLIENT_KEY_PATH

LOGGER = logging.getLogger(__name__)


class ClientKeyStore:
    """Reads and writes the webOS ``client-key`` as a single trimmed token."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or DEFAULT_CLIENT_KEY_PATH

    def load(self) -> Optional[str]:
        """Return the stored key, or None if absent, empty or unreadable."""

        if not self.path.exists():
            return None

        try:
            key = self.path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            LOGGER.warning("Unable to read client key from %s: %s", self.path, exc)
            return None

        return key or None

    def save(self, key: str) -> None:
        """Replace the stored key atomically.

        Raises:
            OSError: If the key cannot be written.
        """

        value = key.strip()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f".{self.path.name}.tmp")

        try:
            with temp_path.open("w", encoding="utf-8") as stream:
                stream.write(value)
                stream.flush()
                os.fsync(stream.fileno())

            # Secure file permissions (Unix only)
            if hasattr(os, "chmod"):
                os.chmod(temp_path, 0o600)  # rw-------

            os.replace(temp_path, self.path)
        except OSError:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            raise

        LOGGER.info("Stored television client key at %s", self.path)

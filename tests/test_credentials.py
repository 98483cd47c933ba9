import os
import stat
from pathlib import Path

import pytest

from webos_relay.credentials import ClientKeyStore


def test_load_returns_none_when_missing(tmp_path: Path) -> None:
    store = ClientKeyStore(tmp_path / "missing")

    assert store.load() is None


def test_load_trims_contents(tmp_path: Path) -> None:
    key_path = tmp_path / ".lgtv_key"
    key_path.write_text("  abc123\n", encoding="utf-8")

    assert ClientKeyStore(key_path).load() == "abc123"


def test_load_treats_blank_file_as_missing(tmp_path: Path) -> None:
    key_path = tmp_path / ".lgtv_key"
    key_path.write_text("\n  \n", encoding="utf-8")

    assert ClientKeyStore(key_path).load() is None


def test_save_writes_trimmed_key_atomically(tmp_path: Path) -> None:
    key_path = tmp_path / "state" / ".lgtv_key"
    store = ClientKeyStore(key_path)

    store.save("  new-key \n")

    assert key_path.read_text(encoding="utf-8") == "new-key"
    assert stat.S_IMODE(os.stat(key_path).st_mode) == 0o600
    assert sorted(p.name for p in key_path.parent.iterdir()) == [".lgtv_key"]
    assert store.load() == "new-key"


def test_save_replaces_existing_key(tmp_path: Path) -> None:
    key_path = tmp_path / ".lgtv_key"
    key_path.write_text("old-key", encoding="utf-8")

    ClientKeyStore(key_path).save("new-key")

    assert key_path.read_text(encoding="utf-8") == "new-key"


def test_save_raises_when_directory_is_unwritable(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    store = ClientKeyStore(blocker / ".lgtv_key")

    with pytest.raises(OSError):
        store.save("new-key")

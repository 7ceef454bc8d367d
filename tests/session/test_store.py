from __future__ import annotations

from pathlib import Path

import pytest

from cnd.core.exceptions import StoreCorruptError, StoreUnreadableError, StoreWriteError
from cnd.core.session import STATE_VERSION, RegistryDocument, SessionEntry, StateStore


def test_load_missing_file_is_empty(tmp_path: Path) -> None:
    doc = StateStore(tmp_path / ".state").load()
    assert doc.entries == {}
    assert doc.version == STATE_VERSION


def test_load_empty_file_is_empty(tmp_path: Path) -> None:
    path = tmp_path / ".state"
    path.write_text("")
    assert StateStore(path).load().entries == {}


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "nested" / ".state")
    doc = RegistryDocument(
        entries={
            "ns/api/web": SessionEntry(folder="/src", sync_endpoint="127.0.0.1:9000"),
            "ns/db/": SessionEntry(folder="/db"),
        }
    )
    store.save(doc)

    assert store.load().entries == doc.entries


def test_save_stamps_current_version(tmp_path: Path) -> None:
    store = StateStore(tmp_path / ".state")
    store.save(RegistryDocument(version="0.1"))
    assert store.load().version == STATE_VERSION


def test_load_accepts_numeric_version_and_null_entries(tmp_path: Path) -> None:
    path = tmp_path / ".state"
    path.write_text("version: 1.0\nservices:\n  ns/api/:\n")

    doc = StateStore(path).load()
    assert doc.entries == {"ns/api/": SessionEntry(folder="")}


def test_load_invalid_yaml_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / ".state"
    path.write_text("services: {unterminated\n")

    with pytest.raises(StoreCorruptError) as exc:
        StateStore(path).load()
    assert exc.value.context["path"] == str(path)


def test_load_wrong_shape_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / ".state"
    path.write_text("services:\n  ns/api/:\n    folder: 42\n")

    with pytest.raises(StoreCorruptError) as exc:
        StateStore(path).load()
    assert exc.value.context["errors"]


def test_load_directory_is_unreadable(tmp_path: Path) -> None:
    path = tmp_path / ".state"
    path.mkdir()

    with pytest.raises(StoreUnreadableError):
        StateStore(path).load()


def test_corrupt_file_is_not_overwritten_by_load(tmp_path: Path) -> None:
    path = tmp_path / ".state"
    path.write_text("- just\n- a list\n")

    with pytest.raises(StoreCorruptError):
        StateStore(path).load()
    assert path.read_text() == "- just\n- a list\n"


def test_save_into_file_parent_fails(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    with pytest.raises(StoreWriteError):
        StateStore(blocker / ".state").save(RegistryDocument.empty())

"""
Stale session eviction.

Live daemons are modelled by pid files holding this test process's PID
(REAL psutil calls, no mocks).
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from cnd.core.exceptions import SessionNotFoundError, StoreWriteError
from cnd.core.model import Dev
from cnd.core.session import (
    SessionEntry,
    SessionRegistry,
    StateStore,
    find_stale,
    reconcile,
    syncthing_exists,
)

API = Dev(deployment="api", container="web", source="/src")


def _make_session_folder(home: Path, namespace: str = "team-a", deployment: str = "api") -> Path:
    folder = home / namespace / deployment
    folder.mkdir(parents=True)
    return folder


class TestSyncthingExists:
    def test_running_pid_is_alive(self, tmp_path: Path) -> None:
        (tmp_path / "syncthing.pid").write_text(f"{os.getpid()}\n")
        assert syncthing_exists(tmp_path)

    def test_missing_pid_file_is_dead(self, tmp_path: Path) -> None:
        assert not syncthing_exists(tmp_path)

    def test_dead_pid_is_dead(self, tmp_path: Path) -> None:
        (tmp_path / "syncthing.pid").write_text("999999\n")
        assert not syncthing_exists(tmp_path)

    def test_custom_pid_filename(self, tmp_path: Path) -> None:
        (tmp_path / "daemon.pid").write_text(str(os.getpid()))
        assert syncthing_exists(tmp_path, pid_filename="daemon.pid")
        assert not syncthing_exists(tmp_path)


class TestRemoveIfStale:
    def test_folder_gone_evicts(self, registry: SessionRegistry) -> None:
        registry.insert("team-a", API, "127.0.0.1:9000")
        entry = registry.get("team-a", API)

        assert registry.remove_if_stale(entry, "team-a/api/web") is True
        with pytest.raises(SessionNotFoundError):
            registry.get("team-a", API)

    def test_daemon_gone_evicts(self, registry: SessionRegistry, cnd_home: Path) -> None:
        _make_session_folder(cnd_home)
        registry.insert("team-a", API, "127.0.0.1:9000")
        entry = registry.get("team-a", API)

        assert registry.remove_if_stale(entry, "team-a/api/web") is True
        assert registry.all() == {}

    def test_live_session_is_kept(self, registry: SessionRegistry, cnd_home: Path, live_sessions) -> None:
        live_sessions.add(_make_session_folder(cnd_home))
        registry.insert("team-a", API, "127.0.0.1:9000")
        entry = registry.get("team-a", API)

        assert registry.remove_if_stale(entry, "team-a/api/web") is False
        assert registry.get("team-a", API) == entry

    def test_folder_is_derived_from_key_not_entry(self, registry: SessionRegistry, cnd_home: Path, live_sessions) -> None:
        live_sessions.add(_make_session_folder(cnd_home))
        registry.insert("team-a", API, "127.0.0.1:9000")

        # The entry's own folder does not exist; only the key matters.
        bogus = SessionEntry(folder="/does/not/exist", sync_endpoint="127.0.0.1:9000")
        assert registry.remove_if_stale(bogus, "team-a/api/web") is False

    def test_real_pid_file_keeps_session(self, cnd_home: Path) -> None:
        registry = SessionRegistry.from_config()
        folder = _make_session_folder(cnd_home)
        (folder / "syncthing.pid").write_text(f"{os.getpid()}\n")
        registry.insert("team-a", API, "127.0.0.1:9000")

        assert registry.remove_if_stale(registry.get("team-a", API), "team-a/api/web") is False

    def test_malformed_key_is_left_alone(self, registry: SessionRegistry, caplog) -> None:
        registry.state_path.write_text("services:\n  lonely:\n    folder: /src\n")
        entry = registry.get_by_key("lonely")

        with caplog.at_level(logging.INFO):
            assert registry.remove_if_stale(entry, "lonely") is False

        assert "manual action might be required" in caplog.text
        assert "lonely" in registry.all()

    def test_failed_delete_reports_not_removed(self, registry: SessionRegistry, monkeypatch, caplog) -> None:
        registry.insert("team-a", API, "127.0.0.1:9000")
        entry = registry.get("team-a", API)

        def _fail(doc) -> None:
            raise StoreWriteError("disk full", path=registry.state_path)

        monkeypatch.setattr(registry.store, "save", _fail)

        assert registry.remove_if_stale(entry, "team-a/api/web") is False
        assert "Could not remove stale session" in caplog.text


class TestReconcile:
    def test_reconcile_evicts_only_stale(self, registry: SessionRegistry, cnd_home: Path, live_sessions) -> None:
        live_sessions.add(_make_session_folder(cnd_home, "team-a", "api"))
        registry.insert("team-a", API, "127.0.0.1:9000")
        registry.insert("team-b", Dev(deployment="db", source="/db"), "127.0.0.1:9001")

        assert reconcile(registry) == ["team-b/db/"]
        assert list(registry.all()) == ["team-a/api/web"]

    def test_find_stale_does_not_mutate(self, registry: SessionRegistry) -> None:
        registry.insert("team-b", Dev(deployment="db", source="/db"), "127.0.0.1:9001")

        assert find_stale(registry) == ["team-b/db/"]
        assert list(registry.all()) == ["team-b/db/"]

    def test_reconcile_on_missing_state_file(self, cnd_home: Path) -> None:
        registry = SessionRegistry(StateStore(cnd_home / ".state"), home=cnd_home)
        assert reconcile(registry) == []

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from cnd.core.config import ConfigManager, get_config
from cnd.core.exceptions import ConfigError
from cnd.core.utils.paths import get_cnd_home, resolve_kubeconfig_path


def test_home_follows_cnd_home(cnd_home: Path) -> None:
    assert get_cnd_home() == cnd_home


def test_relative_home_is_under_user_home(monkeypatch) -> None:
    monkeypatch.setenv("CND_HOME", "custom-cnd")
    assert get_cnd_home() == Path.home() / "custom-cnd"


def test_defaults(cnd_home: Path) -> None:
    cfg = get_config()
    assert cfg.home == cnd_home
    assert cfg.state_path == cnd_home / ".state"
    assert cfg.sync_pid_filename == "syncthing.pid"
    assert cfg.manifest_filename == "cnd.yml"
    assert cfg.log_level == "warn"
    assert cfg.log_path is None
    assert cfg.analytics_flag_path == cnd_home / ".noanalytics"


def test_user_config_overrides_defaults(cnd_home: Path) -> None:
    (cnd_home / "config.yaml").write_text(yaml.safe_dump({"state": {"filename": "sessions.yaml"}, "logging": {"file": "cnd.log"}}))

    cfg = get_config()
    assert cfg.state_path == cnd_home / "sessions.yaml"
    assert cfg.log_path == cnd_home / "cnd.log"
    assert cfg.sync_pid_filename == "syncthing.pid"


def test_env_overrides_are_typed(cnd_home: Path, monkeypatch) -> None:
    monkeypatch.setenv("CND_logging__level", "debug")
    monkeypatch.setenv("CND_analytics__flush_timeout_seconds", "2.5")

    cfg = get_config()
    assert cfg.log_level == "debug"
    assert cfg.analytics["flush_timeout_seconds"] == 2.5


def test_cache_tracks_env_changes(cnd_home: Path, monkeypatch) -> None:
    assert get_config().log_level == "warn"
    monkeypatch.setenv("CND_logging__level", "error")
    assert get_config().log_level == "error"


def test_invalid_log_level_fails_validation(cnd_home: Path, monkeypatch) -> None:
    monkeypatch.setenv("CND_logging__level", "chatty")
    with pytest.raises(ConfigError):
        get_config()


def test_invalid_user_yaml_fails_closed(cnd_home: Path) -> None:
    (cnd_home / "config.yaml").write_text("state: [broken\n")
    with pytest.raises(ConfigError):
        ConfigManager(cnd_home).load_config()


def test_non_mapping_user_config_fails(cnd_home: Path) -> None:
    (cnd_home / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        ConfigManager(cnd_home).load_config()


def test_malformed_env_key_fails(cnd_home: Path, monkeypatch) -> None:
    monkeypatch.setenv("CND_logging____level", "debug")
    with pytest.raises(ConfigError, match="empty segment"):
        ConfigManager(cnd_home).load_config()


def test_kubeconfig_in_home_wins(cnd_home: Path) -> None:
    assert resolve_kubeconfig_path(cnd_home) == Path.home() / ".kube" / "config"
    (cnd_home / "kubeconfig").write_text("")
    assert resolve_kubeconfig_path(cnd_home) == cnd_home / "kubeconfig"

"""
cnd configuration management (YAML-only).
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from cnd.core.exceptions import ConfigError
from cnd.core.schemas import SchemaValidationError, validate_payload
from cnd.core.utils.io import read_yaml
from cnd.core.utils.merge import deep_merge
from cnd.core.utils.paths import HOME_ENV_VAR, get_cnd_home
from cnd.data import get_data_path

logger = logging.getLogger(__name__)

USER_CONFIG_FILENAME = "config.yaml"


class ConfigManager:
    """Load, merge, and validate cnd configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: CND_* (``__`` separates sections)
    2. User config: <home>/config.yaml
    3. Bundled defaults: cnd.data/config/defaults.yaml
    """

    ENV_PREFIX = "CND_"
    # Consumed by path resolution directly, not a config key.
    RESERVED_ENV = {HOME_ENV_VAR}

    def __init__(self, home: Optional[Path] = None) -> None:
        self.home = Path(home) if home is not None else get_cnd_home()
        self.defaults_path = get_data_path("config", "defaults.yaml")
        self.user_config_path = self.home / USER_CONFIG_FILENAME

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except FileNotFoundError:
            return {}
        except Exception as exc:
            raise ConfigError(f"Invalid configuration file {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration file {path} must contain a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__") if "__" in raw else raw.split("_")
        if any(seg == "" for seg in segs):
            raise ConfigError(f"Malformed {self.ENV_PREFIX}* key: empty segment in '{raw}'.")
        # Normalize to lowercase so env overrides create canonical keys.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(self.ENV_PREFIX) or key in self.RESERVED_ENV:
                continue
            path = self._parse_env_key(key[len(self.ENV_PREFIX):])
            if not path:
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Any = root
        for part in path[:-1]:
            if not isinstance(cur, dict):
                raise ConfigError(f"Environment override traverses a non-mapping value at '{part}'")
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration dictionary."""
        cfg = self.load_yaml(self.defaults_path)
        user_cfg = self.load_yaml(self.user_config_path)
        if user_cfg:
            logger.debug("Merging user configuration from %s", self.user_config_path)
            cfg = deep_merge(cfg, user_cfg)
        self.apply_env_overrides(cfg)

        if validate:
            try:
                validate_payload(cfg, "config")
            except SchemaValidationError as exc:
                raise ConfigError(str(exc), context={"path": str(self.user_config_path)}) from exc
        return cfg


@dataclass(frozen=True)
class CndConfig:
    """Typed view over the merged configuration."""

    home: Path
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.raw.get(name)
        return section if isinstance(section, dict) else {}

    @property
    def state_path(self) -> Path:
        return self.home / str(self._section("state").get("filename", ".state"))

    @property
    def sync_pid_filename(self) -> str:
        return str(self._section("sync").get("pid_filename", "syncthing.pid"))

    @property
    def manifest_filename(self) -> str:
        return str(self._section("manifest").get("filename", "cnd.yml"))

    @property
    def kubeconfig_filename(self) -> str:
        return str(self._section("kubeconfig").get("filename", "kubeconfig"))

    @property
    def log_level(self) -> str:
        return str(self._section("logging").get("level", "warn"))

    @property
    def log_path(self) -> Optional[Path]:
        value = self._section("logging").get("file")
        if not value:
            return None
        p = Path(str(value)).expanduser()
        return p if p.is_absolute() else self.home / p

    @property
    def analytics(self) -> Dict[str, Any]:
        return dict(self._section("analytics"))

    @property
    def analytics_flag_path(self) -> Path:
        return self.home / str(self.analytics.get("flag_filename", ".noanalytics"))


_CONFIG_CACHE: Dict[str, CndConfig] = {}
_CONFIG_CACHE_MUTEX = threading.Lock()


def _cache_key(home: Path) -> str:
    # Tests and long-running processes may mutate CND_* env vars or the user
    # config file; both are part of the key.
    env_items = sorted((k, v) for k, v in os.environ.items() if k.startswith(ConfigManager.ENV_PREFIX))
    user_cfg = home / USER_CONFIG_FILENAME
    try:
        st = user_cfg.stat()
        file_fp: Union[Tuple[int, int], None] = (int(st.st_mtime_ns), int(st.st_size))
    except OSError:
        file_fp = None
    digest = hashlib.sha256(repr((env_items, file_fp)).encode("utf-8")).hexdigest()[:12]
    return f"{home}:{digest}"


def get_config(home: Optional[Path] = None) -> CndConfig:
    """Return the (cached) configuration for ``home`` (default: resolved cnd home)."""
    resolved = Path(home) if home is not None else get_cnd_home()
    key = _cache_key(resolved)
    with _CONFIG_CACHE_MUTEX:
        cached = _CONFIG_CACHE.get(key)
        if cached is not None:
            return cached
    cfg = CndConfig(home=resolved, raw=ConfigManager(resolved).load_config())
    with _CONFIG_CACHE_MUTEX:
        _CONFIG_CACHE[key] = cfg
    return cfg


def clear_config_cache() -> None:
    with _CONFIG_CACHE_MUTEX:
        _CONFIG_CACHE.clear()


__all__ = ["ConfigManager", "CndConfig", "get_config", "clear_config_cache"]

"""cnd configuration (YAML defaults + user overlay + CND_* environment)."""
from __future__ import annotations

from .manager import ConfigManager, CndConfig, clear_config_cache, get_config

__all__ = ["ConfigManager", "CndConfig", "clear_config_cache", "get_config"]

import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'cnd'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from cnd.core.config import clear_config_cache
from cnd.core.session import SessionRegistry, StateStore
from cnd.core.utils.stdlib_logging import reset_logging_for_tests


@pytest.fixture(autouse=True)
def _isolate_cnd_env(monkeypatch):
    """Drop CND_* variables leaking in from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("CND_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()
    reset_logging_for_tests()


@pytest.fixture
def cnd_home(tmp_path, monkeypatch) -> Path:
    """Point the cnd home at an isolated temp directory."""
    home = tmp_path / "cnd-home"
    home.mkdir()
    monkeypatch.setenv("CND_HOME", str(home))
    clear_config_cache()
    return home


@pytest.fixture
def live_sessions():
    """Mutable set of session folders the liveness check reports as running."""
    return set()


@pytest.fixture
def registry(cnd_home, live_sessions) -> SessionRegistry:
    """Registry over an empty state file whose liveness check is driven by ``live_sessions``."""
    return SessionRegistry(
        StateStore(cnd_home / ".state"),
        home=cnd_home,
        liveness_check=lambda folder: folder in live_sessions,
    )

"""Fire-and-forget usage events.

Events are posted from daemon threads so commands never wait on the network.
At exit the CLI gives outstanding sends a short grace period and moves on
regardless. Users opt out with ``cnd analytics --disable``, which drops a
flag file into the cnd home.
"""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
import platform
import threading
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from cnd import __version__
from cnd.core.config import CndConfig, get_config
from cnd.core.exceptions import CndError

logger = logging.getLogger(__name__)

APP_ID = "cnd"

EVENT_UP = "up"
EVENT_UP_END = "upend"
EVENT_EXEC = "exec"
EVENT_EXEC_END = "execend"
EVENT_RUN = "run"
EVENT_RUN_END = "runend"

_MACHINE_ID_PATHS = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))

_PENDING: List[threading.Thread] = []
_PENDING_MUTEX = threading.Lock()
_USER_ID: Optional[str] = None
_ACTION_ID: Optional[str] = None


@dataclass(frozen=True)
class Event:
    action: str
    event: str
    uid: str
    time: int
    version: str
    os: str


def new_action_id() -> str:
    """Return an id correlating the events of one command invocation."""
    return str(uuid.uuid4())


def begin_action() -> str:
    """Start a new invocation: later events share the returned action id."""
    global _ACTION_ID
    _ACTION_ID = new_action_id()
    return _ACTION_ID


def current_action_id() -> str:
    return _ACTION_ID or begin_action()


def _machine_id() -> Optional[str]:
    for path in _MACHINE_ID_PATHS:
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if value:
            return value
    return None


def user_id() -> str:
    """Anonymous, stable id for this machine.

    The raw machine id never leaves the host; it is hashed with the app id.
    """
    global _USER_ID
    if _USER_ID is None:
        raw = _machine_id()
        if raw is None:
            logger.debug("failed to generate a machine id")
            _USER_ID = "na"
        else:
            _USER_ID = hmac.new(raw.encode("utf-8"), APP_ID.encode("utf-8"), hashlib.sha256).hexdigest()
    return _USER_ID


def _flag_path(config: Optional[CndConfig] = None) -> Path:
    return (config or get_config()).analytics_flag_path


def is_enabled(config: Optional[CndConfig] = None) -> bool:
    return not _flag_path(config).exists()


def disable(config: Optional[CndConfig] = None) -> None:
    flag = _flag_path(config)
    flag.parent.mkdir(parents=True, exist_ok=True)
    flag.touch(exist_ok=True)


def enable(config: Optional[CndConfig] = None) -> None:
    _flag_path(config).unlink(missing_ok=True)


def _post(event: Event, endpoint: str, timeout: float) -> None:
    data = json.dumps(asdict(event)).encode("utf-8")
    logger.debug("[%s] sending analytics: %s", event.action, data.decode("utf-8"))
    req = Request(endpoint, data=data, method="POST", headers={"Content-Type": "application/json"})
    try:
        with urlopen(req, timeout=timeout) as resp:
            resp.read()
    except HTTPError as e:
        logger.debug("[%s] analytics fail to process request: %d", event.action, e.code)
    except (URLError, OSError) as e:
        logger.debug("[%s] failed to send the analytics: %s", event.action, e)


def send(event_name: str, action_id: str, config: Optional[CndConfig] = None) -> Optional[threading.Thread]:
    """Post ``event_name`` in the background.

    Returns the sending thread, or None when analytics are disabled or no
    endpoint is configured.
    """
    try:
        cfg = config or get_config()
    except CndError as e:
        logger.debug("[%s] analytics skipped, configuration unavailable: %s", action_id, e)
        return None
    if not is_enabled(cfg):
        return None
    settings = cfg.analytics
    endpoint = str(settings.get("endpoint") or "")
    if not endpoint:
        return None

    event = Event(
        action=action_id,
        event=event_name,
        uid=user_id(),
        time=int(time.time()),
        version=__version__,
        os=platform.system().lower(),
    )
    timeout = float(settings.get("request_timeout_seconds", 65))

    thread = threading.Thread(target=_post, args=(event, endpoint, timeout), name=f"cnd-analytics-{event_name}", daemon=True)
    with _PENDING_MUTEX:
        _PENDING[:] = [t for t in _PENDING if t.is_alive()]
        _PENDING.append(thread)
    thread.start()
    return thread


def wait(timeout: Optional[float] = None, config: Optional[CndConfig] = None) -> bool:
    """Give outstanding events until ``timeout`` to be sent.

    Returns True when everything was sent, False when the deadline passed
    first. Never raises.
    """
    cfg = config or get_config()
    if not is_enabled(cfg):
        return True
    if timeout is None:
        timeout = float(cfg.analytics.get("flush_timeout_seconds", 1.0))

    logger.debug("waiting for analytics...")
    deadline = time.monotonic() + timeout
    with _PENDING_MUTEX:
        pending = list(_PENDING)
    for thread in pending:
        thread.join(max(0.0, deadline - time.monotonic()))

    if any(t.is_alive() for t in pending):
        logger.debug("some analytics were not sent before shutdown")
        return False
    with _PENDING_MUTEX:
        _PENDING[:] = [t for t in _PENDING if t.is_alive()]
    logger.debug("all analytics were sent")
    return True


__all__ = [
    "EVENT_UP",
    "EVENT_UP_END",
    "EVENT_EXEC",
    "EVENT_EXEC_END",
    "EVENT_RUN",
    "EVENT_RUN_END",
    "Event",
    "new_action_id",
    "begin_action",
    "current_action_id",
    "user_id",
    "is_enabled",
    "enable",
    "disable",
    "send",
    "wait",
]

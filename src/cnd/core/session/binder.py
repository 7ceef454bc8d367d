"""Tie a session's registration to the lifetime of the operation that owns it.

When the owning operation ends (its cancellation event fires) the session's
sync endpoint is cleared; the entry itself is kept so the session can be
resumed. Cleanup runs in a detached asyncio task. Whoever owns process
shutdown joins those tasks through a :class:`WaitGroup` with a deadline.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from cnd.core import analytics
from cnd.core.model import Dev

from .key import SessionKey
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class WaitGroup:
    """Counts outstanding background tasks so shutdown can wait for them."""

    def __init__(self) -> None:
        self._count = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def count(self) -> int:
        return self._count

    def add(self, n: int = 1) -> None:
        if self._count + n < 0:
            raise ValueError("WaitGroup counter cannot go negative")
        self._count += n
        if self._count == 0:
            self._idle.set()
        else:
            self._idle.clear()

    def done(self) -> None:
        self.add(-1)

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until every task has finished or ``timeout`` elapses.

        Returns False on timeout; the tasks keep running.
        """
        if self._count == 0:
            return True
        try:
            await asyncio.wait_for(self._idle.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True


def bind(
    cancelled: asyncio.Event,
    registry: SessionRegistry,
    namespace: str,
    dev: Dev,
    wait_group: Optional[WaitGroup] = None,
    *,
    end_event: Optional[str] = None,
) -> "asyncio.Task[None]":
    """Stop the session for ``dev`` once ``cancelled`` is set.

    Must be called from a running event loop. The stop itself runs in a
    worker thread so a busy registry never blocks the loop. Failures to stop
    the session are logged; there is no caller left to report them to.
    ``end_event`` names the analytics event sent once the session stopped.
    """
    key = str(SessionKey.for_dev(namespace, dev))
    if wait_group is not None:
        wait_group.add()

    async def _stop_when_cancelled() -> None:
        try:
            await cancelled.wait()
            try:
                await asyncio.to_thread(registry.stop, namespace, dev)
            except Exception as exc:
                logger.error("Could not stop session %s: %s", key, exc)
                return
            logger.debug("insert clean shutdown: %s", key)
            if end_event:
                analytics.send(end_event, analytics.current_action_id())
        finally:
            if wait_group is not None:
                wait_group.done()

    return asyncio.get_running_loop().create_task(
        _stop_when_cancelled(), name=f"cnd-session-{key}"
    )


def insert_and_bind(
    cancelled: asyncio.Event,
    registry: SessionRegistry,
    namespace: str,
    dev: Dev,
    sync_endpoint: str,
    wait_group: Optional[WaitGroup] = None,
) -> "asyncio.Task[None]":
    """Register the session, then clear its endpoint when ``cancelled`` fires.

    Sends the ``up`` event once registered and ``upend`` once stopped, both
    under the invocation's action id. Insert errors propagate and no cleanup
    task is started.
    """
    registry.insert(namespace, dev, sync_endpoint)
    analytics.send(analytics.EVENT_UP, analytics.current_action_id())
    return bind(cancelled, registry, namespace, dev, wait_group, end_event=analytics.EVENT_UP_END)


__all__ = ["WaitGroup", "bind", "insert_and_bind"]

"""
ActivityLock: reentrant turn-taking guard for agent activity.

The voice pipeline and the autonomous behavior loop share one instance. While
it is active, a voice turn or behavior tick that finds it held skips its own
turn instead of waiting; there is no queue and no fairness.

Everything runs on one event loop, so the lock orders user-visible turns and
shared session state rather than protecting against threads.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ActivityLock:
    """Entry counter; active while count > 0. enter()/exit() nest."""

    def __init__(self, name: str = "agent-activity") -> None:
        self._name = name
        self._count = 0

    def enter(self) -> None:
        self._count += 1
        logger.debug("%s enter (depth=%d)", self._name, self._count)

    def exit(self) -> None:
        """Decrement; an unmatched exit() is ignored, the count never goes negative."""
        if self._count == 0:
            logger.warning("%s exit() without matching enter()", self._name)
            return
        self._count -= 1
        logger.debug("%s exit (depth=%d)", self._name, self._count)

    def is_active(self) -> bool:
        return self._count > 0

    @property
    def depth(self) -> int:
        return self._count

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Hold the lock for the duration of fn(); released on every exit path."""
        self.enter()
        try:
            return await fn()
        finally:
            self.exit()

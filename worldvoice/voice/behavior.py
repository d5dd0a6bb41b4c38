"""
BehaviorLoop: autonomous agent ticks gated by the activity lock.

Each tick runs the injected behavior unless a voice turn holds the lock. The
behavior reports whether other players are around; the next delay is drawn
from the active range when they are and from the (longer) idle range when
the agent is alone.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

from worldvoice.config import get_settings
from worldvoice.voice.activity_lock import ActivityLock

logger = logging.getLogger(__name__)

Behavior = Callable[[], Awaitable[bool]]


class BehaviorLoop:
    def __init__(
        self,
        lock: ActivityLock,
        behavior: Behavior,
        interval: tuple[float, float] | None = None,
        idle_interval: tuple[float, float] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        settings = get_settings()
        self._lock = lock
        self._behavior = behavior
        self._interval = interval or (settings.BEHAVIOR_INTERVAL_MIN_SEC, settings.BEHAVIOR_INTERVAL_MAX_SEC)
        self._idle_interval = idle_interval or (
            settings.BEHAVIOR_IDLE_INTERVAL_MIN_SEC,
            settings.BEHAVIOR_IDLE_INTERVAL_MAX_SEC,
        )
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._task: asyncio.Task | None = None
        self._running = False
        self.ticks = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            logger.warning("Behavior loop already running")
            return
        self._running = True
        logger.info("Starting behavior loop")
        self._task = asyncio.ensure_future(self._run())

    async def stop(self) -> None:
        if not self._running:
            logger.warning("Behavior loop not running")
            return
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Stopped behavior loop")

    async def tick(self) -> bool:
        """Run one behavior unless the lock is held. Returns whether other players are present."""
        self.ticks += 1
        if self._lock.is_active():
            logger.info("Skipping behavior - voice activity in progress")
            self.skipped += 1
            # Assume company: a voice turn means someone is talking to us
            return True
        try:
            return await self._behavior()
        except Exception as e:
            logger.error("Error in behavior: %s", e)
            return False

    def next_delay(self, has_other_players: bool) -> float:
        low, high = self._interval if has_other_players else self._idle_interval
        return self._rng.uniform(low, high)

    async def _run(self) -> None:
        while self._running:
            has_other_players = await self.tick()
            await self._sleep(self.next_delay(has_other_players))

"""
Push transport

PushTransport is the listener registry the event router subscribes to.
Real transports call `emit()` when the server pushes an event; delivery is
at-most-once per call with no ordering across event sources.

MockPushTransport generates a trickle of fake server events for development.
"""

import asyncio
import logging
import random
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class PushTransport:
    """Event name -> listeners registry"""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, callback: Listener) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Optional[Listener] = None) -> None:
        """Remove one listener, or every listener of `event` when callback is None"""
        if callback is None:
            self._listeners.pop(event, None)
            return

        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event: str, payload: Any = None) -> int:
        """
        Deliver an event to its listeners

        A failing listener is logged and does not stop delivery to the others.

        Returns:
            Number of listeners called
        """
        listeners = list(self._listeners.get(event, []))
        for callback in listeners:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Listener for '{event}' failed: {e}", exc_info=True)
        return len(listeners)

    def clear(self) -> None:
        self._listeners.clear()


class MockPushTransport(PushTransport):
    """
    Development transport emitting fake server events on an interval

    Every tick emits a leaderboard update (ignored by the engine) and an XP
    grant; roughly one tick in ten also unlocks an achievement.
    """

    ACHIEVEMENT_CHANCE = 0.1

    def __init__(
        self,
        achievement_ids: Sequence[str] = ("mock_achievement",),
        rng: Optional[random.Random] = None,
    ):
        super().__init__()
        self._achievement_ids = list(achievement_ids) or ["mock_achievement"]
        self._rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> None:
        """Emit one round of fake events"""
        self.emit("leaderboard:update", {
            "type": "position_change",
            "data": {
                "userId": "user123",
                "newRank": self._rng.randint(1, 10),
            },
        })

        self.emit("xp:gained", {
            "amount": self._rng.randint(10, 59),
            "source": "mock_push",
        })

        if self._rng.random() < self.ACHIEVEMENT_CHANCE:
            self.emit("achievement:unlocked", {
                "id": self._rng.choice(self._achievement_ids),
                "title": "Mock Achievement",
            })

    async def _loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.tick()

    def start(self, interval: float = 30.0) -> None:
        if self.running:
            return
        logger.info(f"Using mock push transport (every {interval}s)")
        self._task = asyncio.get_running_loop().create_task(self._loop(interval))

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Mock push transport stopped")

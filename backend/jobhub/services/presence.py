from __future__ import annotations
import random
from collections.abc import Callable

from jobhub.utils.scheduling import PeriodicTask

Subscriber = Callable[[int], None]


class OnlineUsers:
    """Simulated online-user counter owned by the app instead of module state."""

    def __init__(self, initial: int = 1247, floor: int = 100, rng: random.Random | None = None):
        self.count = max(floor, initial)
        self.floor = floor
        self.rng = rng or random.Random()
        self._subscribers: list[Subscriber] = []
        self._ticker: PeriodicTask | None = None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)
        callback(self.count)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def tick(self) -> int:
        self.count = max(self.floor, self.count + self.rng.randint(-5, 4))
        for callback in list(self._subscribers):
            callback(self.count)
        return self.count

    async def _tick(self) -> None:
        self.tick()

    def start(self, interval: float = 4.0) -> PeriodicTask:
        if self._ticker is None or not self._ticker.running:
            self._ticker = PeriodicTask(interval, self._tick, name="online-users").start()
        return self._ticker

    async def stop(self) -> None:
        if self._ticker is not None:
            await self._ticker.stop()
            self._ticker = None

import asyncio
import logging
from typing import Callable, List, Optional

from skirmish.engine.engine import Engine
from skirmish.engine.model import Event, GameState
from .eventlog import EventLog

_log = logging.getLogger(__name__)

class TickRunner:
    """Async driver that steps the battle on a fixed tick cadence."""

    def __init__(self, engine: Engine, tick_ms: int = 1000, time_compression: float = 1.0):
        self.engine = engine
        self.tick_ms = tick_ms
        self.events = EventLog()
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.set_time_compression(time_compression)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the battle and the tick loop."""
        if self.running:
            return
        async with self._lock:
            self.events.append_many(self.engine.start())
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the tick loop; no further ticks are scheduled."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self):
        """Main tick loop - one engine step per tick until the battle is decided."""
        while True:
            async with self._lock:
                evts: List[Event] = self.engine.step()
                over = self.engine.game_over
            self.events.record_tick(evts)
            if over:
                _log.info("Tick loop finished: winner=%s", self.engine.state.winner)
                return
            await asyncio.sleep(self.sleep_s)

    async def tick_once(self) -> List[Event]:
        """Run a single tick outside the loop."""
        async with self._lock:
            evts = self.engine.step()
        self.events.record_tick(evts)
        return evts

    async def edit(self, fn: Callable[[Engine], List[Event]]) -> List[Event]:
        """Apply a setup edit to the engine under the lock, logging its events."""
        async with self._lock:
            evts = fn(self.engine)
        self.events.append_many(evts)
        return evts

    async def snapshot(self) -> GameState:
        """Get current state (safe against a running tick)."""
        async with self._lock:
            return self.engine.snapshot()

    def set_time_compression(self, time_compression: float):
        """Update time compression factor (1.0 = real-time, higher = faster)."""
        self.time_compression = max(0.1, min(1000.0, time_compression))
        self.sleep_s = (self.tick_ms / 1000.0) / self.time_compression
        _log.debug("Time compression set to %sx (sleep: %.4fs)", self.time_compression, self.sleep_s)

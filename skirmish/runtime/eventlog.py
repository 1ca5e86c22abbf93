from typing import List, Tuple

from skirmish.engine.model import Event, MoveIndicator, Position

class EventLog:
    """Append-only battle event storage, read by offset for polling clients."""

    def __init__(self):
        self._log: List[Event] = []
        self._indicators: List[MoveIndicator] = []

    def __len__(self) -> int:
        return len(self._log)

    def append_many(self, evts: List[Event]) -> Tuple[int, int]:
        """Append events and return (start_offset, end_offset)."""
        start = len(self._log)
        self._log.extend(evts)
        return start, len(self._log) - 1

    def record_tick(self, evts: List[Event]) -> None:
        """Append a tick's events; its moves replace the previous indicators."""
        start, _ = self.append_many(evts)
        self._indicators = [
            MoveIndicator(id=start + i, origin=Position(*e.data["from"]),
                          destination=Position(*e.data["to"]), color=e.data["color"])
            for i, e in enumerate(evts) if e.kind == "Moved"
        ]

    @property
    def indicators(self) -> List[MoveIndicator]:
        """Moves of the most recent tick; they expire when the next one lands."""
        return list(self._indicators)

    def since(self, offset: int, limit: int = 1000) -> Tuple[List[Event], int]:
        """Return events starting from offset, up to limit."""
        offset = max(0, offset)
        chunk = self._log[offset: offset + limit]
        return chunk, offset + len(chunk)

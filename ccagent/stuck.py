# ccagent/stuck.py
from __future__ import annotations
from collections import deque
from typing import Deque, List

from .types import Coord


class StuckDetector:
    """
    Sliding window of the last `history_size` positions.

    Two independent signals, re-evaluated on every `record`:
    - oscillation: the last `span` positions hold at most `max_distinct` cells
    - revisiting: the current cell shows up `revisit_limit` or more times in the window
    """

    def __init__(self, history_size: int = 10, span: int = 6, max_distinct: int = 2, revisit_limit: int = 3):
        self.span = span
        self.max_distinct = max_distinct
        self.revisit_limit = revisit_limit
        self.history: Deque[Coord] = deque(maxlen=history_size)

    def record(self, pos: Coord) -> bool:
        """Append `pos` and report whether either signal fires for this tick."""
        self.history.append(pos)
        return self.is_oscillating() or self.is_revisiting(pos)

    def is_oscillating(self) -> bool:
        if len(self.history) < self.span:
            return False
        tail = list(self.history)[-self.span:]
        return len(set(tail)) <= self.max_distinct

    def is_revisiting(self, pos: Coord) -> bool:
        return sum(1 for p in self.history if p == pos) >= self.revisit_limit

    def recently_visited(self, pos: Coord, last: int = 3) -> bool:
        # only meaningful once there is more history than the lookback
        if len(self.history) <= last:
            return False
        return pos in list(self.history)[-last:]

    def recent(self) -> List[Coord]:
        return list(self.history)

"""Bounded per-slot history of smoothed weights."""

from __future__ import annotations

from collections import deque
from datetime import datetime

from pillscale._constants import HISTORY_MAX_AGE, HISTORY_MAX_POINTS
from pillscale.models.slot import HistoryPoint


class HistoryRing:
    """Chronological samples per slot, capped by age and by count.

    Retention runs after every append, age first (relative to the sample
    just appended), then count.
    """

    max_points: int = HISTORY_MAX_POINTS
    max_age = HISTORY_MAX_AGE

    def __init__(self) -> None:
        self._points: dict[int, deque[HistoryPoint]] = {}

    def append(self, slot_id: int, timestamp: datetime, grams: float, stable: bool) -> HistoryPoint:
        point = HistoryPoint(timestamp=timestamp, grams=grams, stable=stable)
        points = self._points.setdefault(slot_id, deque())
        points.append(point)

        cutoff = point.timestamp - self.max_age
        while points and points[0].timestamp < cutoff:
            points.popleft()
        while len(points) > self.max_points:
            points.popleft()
        return point

    def entries(self, slot_id: int) -> list[HistoryPoint]:
        return list(self._points.get(slot_id, ()))

    def latest(self, slot_id: int) -> HistoryPoint | None:
        points = self._points.get(slot_id)
        return points[-1] if points else None

    def __len__(self) -> int:
        return sum(len(points) for points in self._points.values())

    def clear(self, slot_id: int | None = None) -> None:
        if slot_id is None:
            self._points.clear()
        else:
            self._points.pop(slot_id, None)

"""Per-slot exponential smoothing of raw load-cell readings."""

from __future__ import annotations

from pillscale._constants import EMA_ALPHA


class EmaFilter:
    """Exponential moving average keyed by slot id.

    The first reading for a slot is taken verbatim; every later reading
    moves the smoothed value ``EMA_ALPHA`` of the way toward it.
    """

    alpha: float = EMA_ALPHA

    def __init__(self) -> None:
        self._values: dict[int, float] = {}

    def update(self, slot_id: int, raw_grams: float) -> float:
        previous = self._values.get(slot_id)
        if previous is None:
            smoothed = float(raw_grams)
        else:
            smoothed = self.alpha * raw_grams + (1.0 - self.alpha) * previous
        self._values[slot_id] = smoothed
        return smoothed

    def current(self, slot_id: int) -> float | None:
        return self._values.get(slot_id)

    def clear(self, slot_id: int | None = None) -> None:
        if slot_id is None:
            self._values.clear()
        else:
            self._values.pop(slot_id, None)

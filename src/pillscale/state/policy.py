"""Deterministic event precedence and derived slot metrics.

Everything here is a pure function of its arguments. ``None`` is the
"not available yet" value for every derived quantity; ``0.0`` is a real
measurement.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from pillscale.models.events import EVENT_TITLES, EventCategory
from pillscale.models.packet import SlotFlag

# Highest priority first. STABLE never produces an event.
EVENT_PRECEDENCE: tuple[tuple[SlotFlag, EventCategory], ...] = (
    (SlotFlag.REMOVED, EventCategory.REMOVED),
    (SlotFlag.TAKEN, EventCategory.TAKEN),
    (SlotFlag.UNEXPECTED, EventCategory.UNEXPECTED),
)


def select_category(flags: int) -> EventCategory | None:
    """Return the single highest-precedence event category set in *flags*."""
    for flag, category in EVENT_PRECEDENCE:
        if flags & flag:
            return category
    return None


def select_status(flags: int) -> str:
    category = select_category(flags)
    if category is not None:
        return EVENT_TITLES[category]
    if flags & SlotFlag.STABLE:
        return "Stable"
    return "Unknown"


def mean_or_none(samples: Sequence[float]) -> float | None:
    if not samples:
        return None
    return math.fsum(samples) / len(samples)


def compute_loss(bottle_baseline_grams: float | None, current_grams: float | None) -> float | None:
    """Weight removed from the bottle since its baseline was captured."""
    if bottle_baseline_grams is None or current_grams is None:
        return None
    return bottle_baseline_grams - current_grams


def estimate_pills_from_dose(mg_per_pill: float | None, target_dose_mg: float | None) -> int | None:
    """Pills needed for *target_dose_mg*, rounded half up."""
    if mg_per_pill is None or target_dose_mg is None:
        return None
    if mg_per_pill <= 0 or target_dose_mg <= 0:
        return None
    return math.floor(target_dose_mg / mg_per_pill + 0.5)


def estimate_dose_weight(average_pill_weight_grams: float | None, target_pill_count: int | None) -> float | None:
    """Expected weight of one dose in grams."""
    if average_pill_weight_grams is None or target_pill_count is None:
        return None
    if target_pill_count <= 0:
        return None
    return average_pill_weight_grams * target_pill_count

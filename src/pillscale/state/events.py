"""Event derivation from packet status flags.

Only the highest-precedence category set on a packet is recorded, so a
single notification produces at most one entry. The log is newest-first and
capped.
"""

from __future__ import annotations

from datetime import datetime

from pillscale._constants import EVENT_LOG_LIMIT
from pillscale.models.events import EVENT_TITLES, EventCategory, EventRecord
from pillscale.state.policy import select_category


def format_detail(category: EventCategory, medication_name: str, delta_mg: int) -> str:
    if category == EventCategory.REMOVED:
        return f"{medication_name} bottle removed"
    return f"{medication_name} (Δ {delta_mg / 1000.0:.3f}g)"


class EventDeriver:
    limit: int = EVENT_LOG_LIMIT

    def __init__(self) -> None:
        self._log: list[EventRecord] = []

    def on_packet(
        self,
        slot_id: int,
        flags: int,
        delta_mg: int,
        medication_name: str,
        timestamp: datetime,
    ) -> EventRecord | None:
        """Record the event a packet's flags describe, if any."""
        category = select_category(flags)
        if category is None:
            return None

        record = EventRecord(
            timestamp=timestamp,
            slot_id=slot_id,
            category=category,
            title=EVENT_TITLES[category],
            detail=format_detail(category, medication_name, delta_mg),
        )
        self._log.insert(0, record)
        del self._log[self.limit :]
        return record

    def events(self, slot_id: int | None = None) -> list[EventRecord]:
        if slot_id is None:
            return list(self._log)
        return [record for record in self._log if record.slot_id == slot_id]

    def __len__(self) -> int:
        return len(self._log)

    def clear(self) -> None:
        self._log.clear()

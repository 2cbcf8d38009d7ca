"""Event log records and firmware command feedback."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pillscale.models._base import ScaleBaseModel, UtcDatetime
from pillscale.models.packet import FirmwareEvent


class EventCategory(StrEnum):
    TAKEN = "taken"
    REMOVED = "removed"
    UNEXPECTED = "unexpected"


EVENT_TITLES: dict[EventCategory, str] = {
    EventCategory.REMOVED: "Bottle removed",
    EventCategory.TAKEN: "Dose taken",
    EventCategory.UNEXPECTED: "Settling / changing",
}


class EventRecord(ScaleBaseModel):
    """A dosing or anomaly event derived from a packet's flag bits."""

    timestamp: UtcDatetime
    slot_id: int = Field(..., ge=0, le=0xFF)
    category: EventCategory
    title: str = ""
    detail: str = ""


_FEEDBACK_MESSAGES: dict[FirmwareEvent, str] = {
    FirmwareEvent.ZERO_PENDING: "ZERO: collecting for 2.5s, don't touch.",
    FirmwareEvent.TARE_PENDING: "TARE: collecting for 2.5s, don't touch.",
    FirmwareEvent.ZERO_DONE: "ZERO complete",
    FirmwareEvent.TARE_DONE: "TARE complete (baseline set)",
    FirmwareEvent.FAILED: "Command failed (not enough stable samples)",
    FirmwareEvent.CAL_SET: "Calibration set",
}


def command_feedback(code: int | FirmwareEvent) -> str | None:
    """Human-readable status for a firmware event code, or None if it carries none."""
    return _FEEDBACK_MESSAGES.get(FirmwareEvent(code))

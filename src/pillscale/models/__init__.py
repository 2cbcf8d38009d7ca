"""pillscale data models."""

from pillscale.models._base import ScaleBaseModel, ScaleEnum
from pillscale.models.events import EventCategory, EventRecord, command_feedback
from pillscale.models.medication import Medication, medication_id_for
from pillscale.models.packet import FirmwareEvent, SlotFlag, TelemetryPacket
from pillscale.models.slot import HistoryPoint, SlotConfig, SlotIdentity, SlotSnapshot, SlotState, flags_text

__all__ = [
    "EventCategory",
    "EventRecord",
    "FirmwareEvent",
    "HistoryPoint",
    "Medication",
    "ScaleBaseModel",
    "ScaleEnum",
    "SlotConfig",
    "SlotFlag",
    "SlotIdentity",
    "SlotSnapshot",
    "SlotState",
    "TelemetryPacket",
    "command_feedback",
    "flags_text",
    "medication_id_for",
]

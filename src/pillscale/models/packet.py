"""Telemetry packet model."""

from __future__ import annotations

import enum

from pydantic import Field

from pillscale.models._base import ScaleBaseModel, ScaleEnum


class SlotFlag(enum.IntFlag):
    """Status bits carried in byte 3 of every notification."""

    TAKEN = 1 << 0
    REMOVED = 1 << 1
    UNEXPECTED = 1 << 2
    STABLE = 1 << 3


class FirmwareEvent(ScaleEnum):
    """Command feedback code carried in byte 10."""

    UNKNOWN = -1
    NONE = 0
    TARE_DONE = 1
    ZERO_DONE = 2
    CAL_SET = 3
    ZERO_PENDING = 10
    TARE_PENDING = 11
    FAILED = 99


class TelemetryPacket(ScaleBaseModel):
    """One decoded load-cell notification.

    Instances come from :func:`pillscale._codec.decode_packet`; values are
    carried as the device reported them, without range checks.
    """

    slot_hint: int = Field(..., ge=0, le=0xFF)
    """Slot id the device believes it serves (before pairing overrides)."""
    flags: int = Field(0, ge=0, le=0xFF)
    delta_mg: int = Field(0, ge=-0x8000, le=0x7FFF)
    """Signed weight change in milligrams reported by the firmware."""
    weight_grams: float = 0.0
    device_baseline_grams: float = 0.0
    """Baseline the device tared to; not the user-set bottle baseline."""
    event_code: int = Field(0, ge=0, le=0xFF)
    sequence: int = Field(0, ge=0, le=0xFF)

    @property
    def slot_flags(self) -> SlotFlag:
        return SlotFlag(self.flags & 0x0F)

    @property
    def taken(self) -> bool:
        return bool(self.flags & SlotFlag.TAKEN)

    @property
    def removed(self) -> bool:
        return bool(self.flags & SlotFlag.REMOVED)

    @property
    def unexpected(self) -> bool:
        return bool(self.flags & SlotFlag.UNEXPECTED)

    @property
    def stable(self) -> bool:
        return bool(self.flags & SlotFlag.STABLE)

    @property
    def firmware_event(self) -> FirmwareEvent:
        return FirmwareEvent(self.event_code)

"""Per-slot records: live state, history points, pairing and user configuration."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pillscale._constants import MAX_TARGET_DOSE_MG, MAX_TARGET_PILL_COUNT
from pillscale.ingestion.normalize import clamp, safe_float, safe_int
from pillscale.models._base import ScaleBaseModel, UtcDatetime
from pillscale.models.packet import SlotFlag


class HistoryPoint(ScaleBaseModel):
    """One smoothed weight sample."""

    timestamp: UtcDatetime
    grams: float
    stable: bool = False


class SlotIdentity(ScaleBaseModel):
    """An active device address <-> slot pairing."""

    address: str
    slot_id: int
    label: str | None = None


def flags_text(flags: int) -> str:
    """Render set status bits as ``"TAKEN, STABLE"``; ``"-"`` when none are set."""
    parts = [str(flag.name) for flag in SlotFlag if flags & flag]
    return ", ".join(parts) if parts else "-"


class SlotState(BaseModel):
    """Live values for one slot, mutated only by the packet pipeline."""

    model_config = ConfigDict(extra="forbid")

    slot_id: int
    smoothed_weight_grams: float | None = None
    last_raw_weight_grams: float | None = None
    last_device_baseline_grams: float | None = None
    last_flags: int = 0
    last_delta_mg: int = 0
    last_event_code: int = 0
    last_sequence: int | None = None
    last_update: datetime | None = None

    @property
    def stable(self) -> bool:
        return bool(self.last_flags & SlotFlag.STABLE)

    @property
    def delta_grams(self) -> float | None:
        """Smoothed weight relative to the device-reported baseline."""
        if self.smoothed_weight_grams is None or self.last_device_baseline_grams is None:
            return None
        return self.smoothed_weight_grams - self.last_device_baseline_grams

    @property
    def status_text(self) -> str:
        # Import lazily to avoid coupling models back into state.
        from pillscale.state.policy import select_status

        return select_status(self.last_flags)

    @property
    def flags_text(self) -> str:
        return flags_text(self.last_flags)


def parse_target_dose(value: Any) -> float:
    """Edited dose target in mg; unparseable text counts as 0."""
    parsed = safe_float(value)
    return clamp(parsed if parsed is not None else 0.0, 0.0, MAX_TARGET_DOSE_MG)


def parse_target_pill_count(value: Any) -> int:
    parsed = safe_int(value)
    return int(clamp(parsed if parsed is not None else 0, 0, MAX_TARGET_PILL_COUNT))


class SlotConfig(BaseModel):
    """User-editable configuration for one slot.

    Serialized with the camelCase keys of the dashboard's stored records
    (``slotName``, ``bottleBaselineG``, ``pillSamplesG``, ...). The average
    pill weight is always derived from the samples; a stored value is
    ignored in favour of the recomputed one.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    slot_id: int = 0
    display_name: str = Field("", alias="slotName")
    medication_id: str | None = None
    target_dose_mg: float = 0.0
    target_pill_count: int = 0
    bottle_baseline_grams: float | None = Field(None, alias="bottleBaselineG")
    pill_sample_grams: list[float] = Field(default_factory=list, alias="pillSamplesG")
    average_pill_weight_grams: float | None = Field(None, alias="avgPillWeightG")

    @field_validator("target_dose_mg", mode="before")
    @classmethod
    def _clamp_dose(cls, value: Any) -> float:
        return parse_target_dose(value)

    @field_validator("target_pill_count", mode="before")
    @classmethod
    def _clamp_pills(cls, value: Any) -> int:
        return parse_target_pill_count(value)

    @field_validator("pill_sample_grams", mode="before")
    @classmethod
    def _samples_list(cls, value: Any) -> Any:
        if value is None:
            return []
        return value

    @field_validator("display_name", mode="before")
    @classmethod
    def _missing_name(cls, value: Any) -> Any:
        # An empty name is replaced with the slot default when stored.
        return "" if value is None else value

    @field_validator("medication_id", mode="before")
    @classmethod
    def _blank_medication(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _derive_average(self) -> SlotConfig:
        self.recompute_average()
        return self

    def recompute_average(self) -> float | None:
        """Recalculate the average pill weight from the captured samples."""
        from pillscale.state.policy import mean_or_none

        self.average_pill_weight_grams = mean_or_none(self.pill_sample_grams)
        return self.average_pill_weight_grams

    def add_sample(self, grams: float) -> float | None:
        self.pill_sample_grams.append(float(grams))
        return self.recompute_average()

    def remove_sample(self, index: int) -> float | None:
        """Drop the sample at *index*; raises ``IndexError`` if there is none."""
        del self.pill_sample_grams[index]
        return self.recompute_average()

    def clear_samples(self) -> None:
        self.pill_sample_grams.clear()
        self.recompute_average()

    def to_record(self) -> str:
        """Serialize for the caller's key/value store."""
        return self.model_dump_json(by_alias=True)


class SlotSnapshot(ScaleBaseModel):
    """Read-only view joining a slot's state, history and configuration."""

    slot_id: int
    display_name: str = ""
    medication_name: str = ""
    smoothed_weight_grams: float | None = None
    device_baseline_grams: float | None = None
    delta_grams: float | None = None
    flags: int = 0
    status_text: str = "Unknown"
    last_update: UtcDatetime | None = None
    address: str | None = None
    device_label: str | None = None
    loss_grams: float | None = None
    config: SlotConfig
    history: tuple[HistoryPoint, ...] = ()

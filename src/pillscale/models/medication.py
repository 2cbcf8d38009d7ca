"""Medication catalog entry."""

from __future__ import annotations

import re

from pydantic import Field, field_validator

from pillscale.models._base import ScaleBaseModel

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def medication_id_for(name: str) -> str:
    """Derive a catalog id from a medication name (``"Vitamin D3"`` -> ``"vitamin_d3"``)."""
    return _SLUG_RE.sub("_", name.strip().lower())


class Medication(ScaleBaseModel):
    """A medication slots may reference by id."""

    id: str
    name: str
    mg_per_pill: float = Field(0.0, ge=0.0)
    """Strength per pill; 0 when unknown (dose conversions are then unavailable)."""
    notes: str = ""

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name

    @classmethod
    def from_name(cls, name: str, *, mg_per_pill: float = 0.0, notes: str = "") -> Medication:
        return cls(id=medication_id_for(name), name=name, mg_per_pill=mg_per_pill, notes=notes.strip())

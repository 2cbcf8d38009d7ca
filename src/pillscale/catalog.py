"""In-memory medication catalog.

Slot configurations hold only a medication id. Lookups through this catalog
never fail: a missing or dangling id resolves to ``None`` (or to the
configured "unknown" name).
"""

from __future__ import annotations

from collections.abc import Iterable

from pillscale._constants import UNKNOWN_MEDICATION
from pillscale.models.medication import Medication


class MedicationCatalog:
    def __init__(self, medications: Iterable[Medication] = (), *, unknown_name: str = UNKNOWN_MEDICATION) -> None:
        self._unknown_name = unknown_name
        self._medications: dict[str, Medication] = {}
        for medication in medications:
            self.add(medication)

    def __len__(self) -> int:
        return len(self._medications)

    def __contains__(self, medication_id: object) -> bool:
        return medication_id in self._medications

    def add(self, medication: Medication) -> Medication:
        """Add or replace the entry with ``medication.id``."""
        self._medications[medication.id] = medication
        return medication

    def get(self, medication_id: str | None) -> Medication | None:
        if medication_id is None:
            return None
        return self._medications.get(medication_id)

    def remove(self, medication_id: str) -> None:
        # Slots still referencing the id fall back to the unknown name.
        self._medications.pop(medication_id, None)

    def all(self) -> list[Medication]:
        return list(self._medications.values())

    def name_for(self, medication_id: str | None) -> str:
        medication = self.get(medication_id)
        return medication.name if medication is not None else self._unknown_name

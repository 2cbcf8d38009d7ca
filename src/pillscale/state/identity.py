"""Device address <-> logical slot pairing table."""

from __future__ import annotations

import logging

from pillscale._constants import MAX_SLOT_ID, MIN_SLOT_ID
from pillscale._redact import redact_address
from pillscale.ingestion.normalize import normalize_address
from pillscale.models.slot import SlotIdentity

_logger = logging.getLogger(__name__)


def _require_address(address: str) -> str:
    normalized = normalize_address(address)
    if normalized is None:
        raise ValueError("device address must be non-empty")
    return normalized


def _require_slot_id(slot_id: int) -> int:
    if not MIN_SLOT_ID <= slot_id <= MAX_SLOT_ID:
        raise ValueError(f"slot id must be between {MIN_SLOT_ID} and {MAX_SLOT_ID}, got {slot_id}")
    return slot_id


class IdentityResolver:
    """Bidirectional pairing table.

    At most one slot per address and one address per slot: pairing evicts
    the previous owner on either side. Labels are keyed by address and are
    kept when the address is unpaired.
    """

    def __init__(self) -> None:
        self._slot_to_address: dict[int, str] = {}
        self._address_to_slot: dict[str, int] = {}
        self._labels: dict[str, str] = {}

    def pair(self, address: str, slot_id: int, label: str | None = None) -> SlotIdentity:
        address = _require_address(address)
        slot_id = _require_slot_id(slot_id)

        old_slot = self._address_to_slot.get(address)
        if old_slot is not None and old_slot != slot_id:
            self._slot_to_address.pop(old_slot, None)
            _logger.debug("Device %s moved from slot %s to slot %s", redact_address(address), old_slot, slot_id)

        old_address = self._slot_to_address.get(slot_id)
        if old_address is not None and old_address != address:
            self._address_to_slot.pop(old_address, None)
            _logger.debug("Slot %s released device %s", slot_id, redact_address(old_address))

        self._slot_to_address[slot_id] = address
        self._address_to_slot[address] = slot_id
        if label is not None and label.strip():
            self._labels[address] = label.strip()
        return SlotIdentity(address=address, slot_id=slot_id, label=self._labels.get(address))

    def unpair(self, slot_id: int) -> str | None:
        """Remove the pairing for *slot_id*; returns the released address, if any."""
        address = self._slot_to_address.pop(slot_id, None)
        if address is not None:
            self._address_to_slot.pop(address, None)
        return address

    def resolve(self, address: str | None) -> int | None:
        normalized = normalize_address(address)
        if normalized is None:
            return None
        return self._address_to_slot.get(normalized)

    def effective_slot(self, address: str | None, slot_hint: int) -> int:
        """Slot a packet belongs to: the pairing wins over the device's own hint."""
        paired = self.resolve(address)
        return paired if paired is not None else slot_hint

    def address_for(self, slot_id: int) -> str | None:
        return self._slot_to_address.get(slot_id)

    def label(self, address: str | None) -> str | None:
        normalized = normalize_address(address)
        if normalized is None:
            return None
        return self._labels.get(normalized)

    def set_label(self, address: str, label: str) -> None:
        address = _require_address(address)
        text = label.strip()
        if text:
            self._labels[address] = text
        else:
            self._labels.pop(address, None)

    def labels(self) -> dict[str, str]:
        return dict(self._labels)

    def entries(self) -> list[SlotIdentity]:
        return [
            SlotIdentity(address=address, slot_id=slot_id, label=self._labels.get(address))
            for slot_id, address in sorted(self._slot_to_address.items())
        ]

    def clear(self) -> None:
        self._slot_to_address.clear()
        self._address_to_slot.clear()
        self._labels.clear()

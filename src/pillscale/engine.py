"""Telemetry decoding and slot state engine."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pillscale._codec import command_payload, decode_packet
from pillscale._redact import redact_address, redact_for_log
from pillscale.catalog import MedicationCatalog
from pillscale.config import EngineConfig
from pillscale.exceptions import PacketDecodeError
from pillscale.models.events import EventRecord, command_feedback
from pillscale.models.medication import Medication
from pillscale.models.packet import TelemetryPacket
from pillscale.models.slot import (
    HistoryPoint,
    SlotConfig,
    SlotIdentity,
    SlotSnapshot,
    SlotState,
    parse_target_dose,
    parse_target_pill_count,
)
from pillscale.persistence import KeyValueStore, export_records, restore_records, write_records
from pillscale.state.events import EventDeriver
from pillscale.state.history import HistoryRing
from pillscale.state.identity import IdentityResolver
from pillscale.state.policy import estimate_dose_weight, estimate_pills_from_dose
from pillscale.state.smoothing import EmaFilter
from pillscale.state.store import SlotStore

_logger = logging.getLogger(__name__)

_UNSET: Any = object()


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one accepted notification."""

    slot_id: int
    packet: TelemetryPacket
    smoothed_grams: float
    event: EventRecord | None = None
    feedback: str | None = None
    device_address: str | None = None


class SlotEngine:
    """Owns every keyed table and runs the per-packet pipeline.

    decode -> resolve slot -> smooth -> history -> event log. Each call to
    :meth:`ingest` runs to completion under one lock, so notifications from
    several devices never interleave partial updates.

    Usage::

        engine = SlotEngine(catalog=MedicationCatalog([...]))
        engine.load(store)
        result = engine.ingest(notification_bytes, device_address=mac)
        engine.save(store)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        catalog: MedicationCatalog | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or EngineConfig()
        self._catalog = catalog if catalog is not None else MedicationCatalog(
            unknown_name=self._config.unknown_medication
        )
        self._clock = clock
        self._lock = threading.RLock()

        self._identity = IdentityResolver()
        self._smoother = EmaFilter()
        self._history = HistoryRing()
        self._events = EventDeriver()
        self._store = SlotStore(slot_name=self._config.slot_name)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def catalog(self) -> MedicationCatalog:
        return self._catalog

    # ------------------------------------------------------------------
    # Packet pipeline
    # ------------------------------------------------------------------

    def ingest(
        self,
        data: bytes | bytearray | memoryview | Iterable[int],
        *,
        device_address: str | None = None,
        received_at: datetime | None = None,
    ) -> IngestResult | None:
        """Process one notification; returns None when it was dropped."""
        if self._config.packet_trace_enabled:
            _logger.debug("Notification from %s: %s", redact_address(device_address), redact_for_log(data))

        try:
            packet = decode_packet(data)
        except PacketDecodeError as exc:
            _logger.debug("Dropping notification from %s: %s", redact_address(device_address), exc)
            return None

        timestamp = received_at if received_at is not None else self._clock()
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)

        with self._lock:
            slot_id = self._identity.effective_slot(device_address, packet.slot_hint)
            previous = self._store.state(slot_id)
            if previous is not None and previous.last_sequence is not None:
                expected = (previous.last_sequence + 1) & 0xFF
                if packet.sequence != expected:
                    _logger.debug(
                        "Slot %s sequence jumped from %s to %s", slot_id, previous.last_sequence, packet.sequence
                    )

            smoothed = self._smoother.update(slot_id, packet.weight_grams)
            self._history.append(slot_id, timestamp, smoothed, packet.stable)
            self._store.apply_packet(slot_id, packet, smoothed, timestamp)
            event = self._events.on_packet(
                slot_id,
                packet.flags,
                packet.delta_mg,
                self._medication_name(slot_id),
                timestamp,
            )

        return IngestResult(
            slot_id=slot_id,
            packet=packet,
            smoothed_grams=smoothed,
            event=event,
            feedback=command_feedback(packet.event_code),
            device_address=device_address,
        )

    @staticmethod
    def command_payload(command: str) -> bytes:
        """Bytes for a ``TARE``/``ZERO`` command (sent by the transport)."""
        return command_payload(command)

    # ------------------------------------------------------------------
    # Pairing
    # ------------------------------------------------------------------

    def pair(self, address: str, slot_id: int, label: str | None = None) -> SlotIdentity:
        with self._lock:
            if label is None and self._identity.label(address) is None:
                label = self._config.default_device_label
            identity = self._identity.pair(address, slot_id, label)
            self._store.ensure_slot(slot_id)
            return identity

    def unpair(self, slot_id: int) -> None:
        with self._lock:
            self._identity.unpair(slot_id)

    def resolve(self, address: str | None) -> int | None:
        with self._lock:
            return self._identity.resolve(address)

    def label(self, address: str | None) -> str | None:
        with self._lock:
            return self._identity.label(address)

    def set_label(self, address: str, label: str) -> None:
        with self._lock:
            self._identity.set_label(address, label)

    def pairings(self) -> list[SlotIdentity]:
        with self._lock:
            return self._identity.entries()

    # ------------------------------------------------------------------
    # Slot configuration
    # ------------------------------------------------------------------

    def slot_config(self, slot_id: int) -> SlotConfig:
        """A copy of the slot's configuration (defaults when never configured)."""
        with self._lock:
            self._store.ensure_slot(slot_id)
            return self._store.config(slot_id).model_copy(deep=True)

    def configure_slot(
        self,
        slot_id: int,
        *,
        display_name: str | None = None,
        medication_id: str | None = _UNSET,
        target_dose_mg: Any = None,
        target_pill_count: Any = None,
    ) -> SlotConfig:
        """Update user-editable fields; arguments left out keep their value.

        Targets accept numbers or free text and are clamped to their ranges;
        ``medication_id=None`` clears the medication reference.
        """
        with self._lock:
            self._store.ensure_slot(slot_id)
            config = self._store.config(slot_id)
            if display_name is not None:
                config.display_name = display_name.strip() or self._config.slot_name(slot_id)
            if medication_id is not _UNSET:
                config.medication_id = medication_id or None
            if target_dose_mg is not None:
                config.target_dose_mg = parse_target_dose(target_dose_mg)
            if target_pill_count is not None:
                config.target_pill_count = parse_target_pill_count(target_pill_count)
            return config.model_copy(deep=True)

    def add_medication(self, medication: Medication, *, assign_to: int | None = None) -> Medication:
        with self._lock:
            self._catalog.add(medication)
            if assign_to is not None:
                self._store.ensure_slot(assign_to)
                self._store.config(assign_to).medication_id = medication.id
            return medication

    def add_pill_sample(self, slot_id: int, grams: float) -> float | None:
        """Store one calibration weight; returns the new average pill weight."""
        with self._lock:
            self._store.ensure_slot(slot_id)
            return self._store.config(slot_id).add_sample(grams)

    def capture_pill_sample(self, slot_id: int) -> float | None:
        """Store the current smoothed weight as a calibration sample.

        Returns the captured weight, or None when the slot has no reading yet.
        """
        with self._lock:
            current = self._store.current_weight(slot_id)
            if current is None:
                return None
            self._store.config(slot_id).add_sample(current)
            return current

    def remove_pill_sample(self, slot_id: int, index: int) -> float | None:
        with self._lock:
            return self._store.config(slot_id).remove_sample(index)

    def clear_pill_samples(self, slot_id: int) -> None:
        with self._lock:
            self._store.config(slot_id).clear_samples()

    def recompute_average(self, slot_id: int) -> float | None:
        with self._lock:
            return self._store.recompute_average(slot_id)

    def set_bottle_baseline(self, slot_id: int, grams: float | None) -> None:
        """Set (or clear with None) the user's full-bottle reference weight."""
        with self._lock:
            self._store.ensure_slot(slot_id)
            self._store.config(slot_id).bottle_baseline_grams = grams

    def set_bottle_baseline_from_current(self, slot_id: int) -> float | None:
        with self._lock:
            current = self._store.current_weight(slot_id)
            if current is None:
                return None
            self._store.config(slot_id).bottle_baseline_grams = current
            return current

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    def compute_loss(self, slot_id: int) -> float | None:
        with self._lock:
            return self._store.compute_loss(slot_id)

    def estimate_pills_from_dose(self, slot_id: int) -> int | None:
        with self._lock:
            config = self._store.config(slot_id)
            medication = self._catalog.get(config.medication_id)
            if medication is None:
                return None
            return estimate_pills_from_dose(medication.mg_per_pill, config.target_dose_mg)

    def estimate_dose_weight(self, slot_id: int) -> float | None:
        with self._lock:
            config = self._store.config(slot_id)
            return estimate_dose_weight(config.average_pill_weight_grams, config.target_pill_count)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def slot_ids(self) -> list[int]:
        with self._lock:
            return self._store.slot_ids()

    def state(self, slot_id: int) -> SlotState | None:
        with self._lock:
            state = self._store.state(slot_id)
            return state.model_copy() if state is not None else None

    def history(self, slot_id: int) -> list[HistoryPoint]:
        with self._lock:
            return self._history.entries(slot_id)

    def events(self, slot_id: int | None = None) -> list[EventRecord]:
        with self._lock:
            return self._events.events(slot_id)

    def snapshot(self, slot_id: int) -> SlotSnapshot:
        with self._lock:
            state = self._store.ensure_slot(slot_id)
            config = self._store.config(slot_id)
            address = self._identity.address_for(slot_id)
            return SlotSnapshot(
                slot_id=slot_id,
                display_name=config.display_name,
                medication_name=self._medication_name(slot_id),
                smoothed_weight_grams=state.smoothed_weight_grams,
                device_baseline_grams=state.last_device_baseline_grams,
                delta_grams=state.delta_grams,
                flags=state.last_flags,
                status_text=state.status_text,
                last_update=state.last_update,
                address=address,
                device_label=self._identity.label(address),
                loss_grams=self._store.compute_loss(slot_id),
                config=config.model_copy(deep=True),
                history=tuple(self._history.entries(slot_id)),
            )

    def snapshots(self) -> list[SlotSnapshot]:
        with self._lock:
            return [self.snapshot(slot_id) for slot_id in self._store.slot_ids()]

    def reset(self) -> None:
        """Drop live readings, history and the event log (e.g. on a mode switch).

        Pairings, labels and slot configuration are kept.
        """
        with self._lock:
            self._smoother.clear()
            self._history.clear()
            self._events.clear()
            self._store.reset()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_records(self) -> dict[str, str]:
        with self._lock:
            return export_records(self._identity.entries(), self._identity.labels(), self._store.configs())

    def save(self, store: KeyValueStore) -> None:
        write_records(store, self.export_records())

    def load(self, store: KeyValueStore) -> list[str]:
        """Restore pairings, labels and configs; returns keys that were skipped.

        Must run before packets for previously known slots are ingested.
        """
        restored = restore_records(store)
        with self._lock:
            for address, label in restored.labels.items():
                self._identity.set_label(address, label)
            for identity in restored.pairings:
                try:
                    self._identity.pair(identity.address, identity.slot_id)
                except ValueError:
                    _logger.debug("Ignoring stored pairing for slot %s", identity.slot_id, exc_info=True)
                    restored.skipped.append(f"slot_mac_{identity.slot_id}")
                    continue
                self._store.ensure_slot(identity.slot_id)
            for config in restored.configs:
                self._store.put_config(config)
        return restored.skipped

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _medication_name(self, slot_id: int) -> str:
        config = self._store.config(slot_id)
        return self._catalog.name_for(config.medication_id)

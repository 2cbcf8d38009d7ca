"""In-memory store for per-slot live state and user configuration.

This is the only component that mutates :class:`SlotState`. Slots are
created on first reference (pairing, configuration or first packet) and are
never deleted, only reset.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from pillscale.models.packet import TelemetryPacket
from pillscale.models.slot import SlotConfig, SlotState
from pillscale.state.policy import compute_loss


def _default_slot_name(slot_id: int) -> str:
    return f"Slot {slot_id}"


class SlotStore:
    def __init__(self, *, slot_name: Callable[[int], str] = _default_slot_name) -> None:
        self._slot_name = slot_name
        self._states: dict[int, SlotState] = {}
        self._configs: dict[int, SlotConfig] = {}

    def ensure_slot(self, slot_id: int) -> SlotState:
        state = self._states.get(slot_id)
        if state is None:
            state = SlotState(slot_id=slot_id)
            self._states[slot_id] = state
        self.config(slot_id)
        return state

    def state(self, slot_id: int) -> SlotState | None:
        return self._states.get(slot_id)

    def config(self, slot_id: int) -> SlotConfig:
        """Configuration for *slot_id*, created with defaults when missing."""
        config = self._configs.get(slot_id)
        if config is None:
            config = SlotConfig(slot_id=slot_id, display_name=self._slot_name(slot_id))
            self._configs[slot_id] = config
        return config

    def put_config(self, config: SlotConfig) -> None:
        if not config.display_name:
            config.display_name = self._slot_name(config.slot_id)
        config.recompute_average()
        self._configs[config.slot_id] = config
        self._states.setdefault(config.slot_id, SlotState(slot_id=config.slot_id))

    def configs(self) -> list[SlotConfig]:
        return [self._configs[slot_id] for slot_id in sorted(self._configs)]

    def slot_ids(self) -> list[int]:
        return sorted(set(self._states) | set(self._configs))

    def apply_packet(
        self,
        slot_id: int,
        packet: TelemetryPacket,
        smoothed_grams: float,
        received_at: datetime,
    ) -> SlotState:
        state = self.ensure_slot(slot_id)
        state.smoothed_weight_grams = smoothed_grams
        state.last_raw_weight_grams = packet.weight_grams
        state.last_device_baseline_grams = packet.device_baseline_grams
        state.last_flags = packet.flags
        state.last_delta_mg = packet.delta_mg
        state.last_event_code = packet.event_code
        state.last_sequence = packet.sequence
        state.last_update = received_at
        return state

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    def recompute_average(self, slot_id: int) -> float | None:
        return self.config(slot_id).recompute_average()

    def current_weight(self, slot_id: int) -> float | None:
        state = self._states.get(slot_id)
        return state.smoothed_weight_grams if state is not None else None

    def compute_loss(self, slot_id: int) -> float | None:
        config = self._configs.get(slot_id)
        if config is None:
            return None
        return compute_loss(config.bottle_baseline_grams, self.current_weight(slot_id))

    def reset(self) -> None:
        """Forget live values for every slot; configuration is kept."""
        for slot_id in list(self._states):
            self._states[slot_id] = SlotState(slot_id=slot_id)

    def clear(self) -> None:
        self._states.clear()
        self._configs.clear()

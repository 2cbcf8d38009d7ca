"""Engine configuration for pillscale."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pillscale._constants import DEFAULT_DEVICE_LABEL, DEFAULT_SLOT_NAME_TEMPLATE, UNKNOWN_MEDICATION
from pillscale.exceptions import PillScaleConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class EngineConfig:
    """Engine configuration.

    Only presentation defaults and diagnostics live here. The smoothing
    factor, history bounds and event log size are fixed properties of the
    engine and are not configurable.

    Parameters
    ----------
    default_device_label : str
        Label stored for a device address when it is paired without one.
    unknown_medication : str
        Name used in event details when a slot has no medication, or its
        medication reference no longer resolves in the catalog.
    slot_name_template : str
        ``str.format`` template for the display name of a fresh slot
        configuration. Must reference ``{slot_id}``.
    packet_trace_enabled : bool
        Emit a DEBUG line (with the device address redacted) for every
        notification handed to the engine.
    """

    default_device_label: str = DEFAULT_DEVICE_LABEL
    unknown_medication: str = UNKNOWN_MEDICATION
    slot_name_template: str = DEFAULT_SLOT_NAME_TEMPLATE
    packet_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if "{slot_id}" not in self.slot_name_template:
            raise PillScaleConfigError(
                f"slot_name_template must contain '{{slot_id}}', got {self.slot_name_template!r}"
            )

    def slot_name(self, slot_id: int) -> str:
        """Default display name for *slot_id*."""
        return self.slot_name_template.format(slot_id=slot_id)

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineConfig:
        """Create configuration from environment variables.

        Reads optional ``PILLSCALE_*`` variables. Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PILLSCALE_DEFAULT_DEVICE_LABEL": "default_device_label",
            "PILLSCALE_UNKNOWN_MEDICATION": "unknown_medication",
            "PILLSCALE_SLOT_NAME_TEMPLATE": "slot_name_template",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val

        if "packet_trace_enabled" not in overrides:
            config_kwargs["packet_trace_enabled"] = _env_bool(
                env.get("PILLSCALE_PACKET_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

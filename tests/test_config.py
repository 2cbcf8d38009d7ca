from __future__ import annotations

import pytest

from pillscale.config import EngineConfig
from pillscale.exceptions import PillScaleConfigError


def test_defaults() -> None:
    config = EngineConfig()

    assert config.default_device_label == "pillLoadCell"
    assert config.unknown_medication == "Unknown med"
    assert config.slot_name(3) == "Slot 3"
    assert config.packet_trace_enabled is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PILLSCALE_DEFAULT_DEVICE_LABEL", "hive")
    monkeypatch.setenv("PILLSCALE_UNKNOWN_MEDICATION", "(none)")
    monkeypatch.setenv("PILLSCALE_SLOT_NAME_TEMPLATE", "Bay {slot_id}")
    monkeypatch.setenv("PILLSCALE_PACKET_TRACE_ENABLED", "yes")

    config = EngineConfig.from_env()

    assert config.default_device_label == "hive"
    assert config.unknown_medication == "(none)"
    assert config.slot_name(1) == "Bay 1"
    assert config.packet_trace_enabled is True


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PILLSCALE_PACKET_TRACE_ENABLED", "1")
    monkeypatch.setenv("PILLSCALE_DEFAULT_DEVICE_LABEL", "hive")

    config = EngineConfig.from_env(packet_trace_enabled=False, default_device_label="bench")

    assert config.packet_trace_enabled is False
    assert config.default_device_label == "bench"


def test_blank_env_values_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PILLSCALE_UNKNOWN_MEDICATION", "  ")
    monkeypatch.setenv("PILLSCALE_PACKET_TRACE_ENABLED", "maybe")

    config = EngineConfig.from_env()

    assert config.unknown_medication == "Unknown med"
    assert config.packet_trace_enabled is False


def test_slot_name_template_must_reference_slot_id() -> None:
    with pytest.raises(PillScaleConfigError, match="slot_id"):
        EngineConfig(slot_name_template="Slot")

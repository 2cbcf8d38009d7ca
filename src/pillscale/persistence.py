"""Key/value records for pairings, device labels and slot configuration.

The engine never chooses a storage backend. Callers hand it anything that
implements :class:`KeyValueStore` (a preferences file, a database table, a
Home Assistant ``Store``...). Key layout::

    slot_mac_<slot>       -> device address
    mac_label_<address>   -> user label for the device
    slot_cfg_<slot>       -> SlotConfig JSON (camelCase keys)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from pillscale._constants import KEY_ADDRESS_LABEL_PREFIX, KEY_SLOT_ADDRESS_PREFIX, KEY_SLOT_CONFIG_PREFIX
from pillscale.exceptions import PersistenceError
from pillscale.ingestion.normalize import normalize_address, safe_int
from pillscale.models.slot import SlotConfig, SlotIdentity

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...


class MemoryStore:
    """Dict-backed :class:`KeyValueStore`."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def as_dict(self) -> dict[str, str]:
        return dict(self._data)


def slot_address_key(slot_id: int) -> str:
    return f"{KEY_SLOT_ADDRESS_PREFIX}{slot_id}"


def address_label_key(address: str) -> str:
    return f"{KEY_ADDRESS_LABEL_PREFIX}{address}"


def slot_config_key(slot_id: int) -> str:
    return f"{KEY_SLOT_CONFIG_PREFIX}{slot_id}"


def _slot_from_key(key: str, prefix: str) -> int | None:
    slot_id = safe_int(key[len(prefix) :])
    if slot_id is None or str(slot_id) != key[len(prefix) :].strip():
        return None
    return slot_id


def parse_slot_config(key: str, value: str) -> SlotConfig:
    """Parse a stored ``slot_cfg_`` record; raises :class:`PersistenceError`."""
    try:
        config = SlotConfig.model_validate_json(value)
    except ValidationError as exc:
        raise PersistenceError(f"unreadable slot configuration record: {exc.error_count()} error(s)", key=key) from exc
    return config


@dataclass
class RestoredRecords:
    """Everything read back from a store."""

    pairings: list[SlotIdentity] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    configs: list[SlotConfig] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def export_records(
    pairings: Iterable[SlotIdentity],
    labels: Mapping[str, str],
    configs: Iterable[SlotConfig],
) -> dict[str, str]:
    records: dict[str, str] = {}
    for identity in pairings:
        records[slot_address_key(identity.slot_id)] = identity.address
    for address, label in labels.items():
        records[address_label_key(address)] = label
    for config in configs:
        records[slot_config_key(config.slot_id)] = config.to_record()
    return records


def restore_records(store: KeyValueStore) -> RestoredRecords:
    """Read every pillscale record from *store*.

    Malformed keys and unreadable configuration records are skipped (and
    listed in ``skipped``); the slot then starts with a fresh configuration.
    """
    restored = RestoredRecords()
    for key in sorted(store.keys()):
        value = store.get(key)
        if value is None or not value.strip():
            continue

        if key.startswith(KEY_SLOT_ADDRESS_PREFIX):
            slot_id = _slot_from_key(key, KEY_SLOT_ADDRESS_PREFIX)
            address = normalize_address(value)
            if slot_id is None or address is None:
                restored.skipped.append(key)
                continue
            restored.pairings.append(SlotIdentity(address=address, slot_id=slot_id))

        elif key.startswith(KEY_ADDRESS_LABEL_PREFIX):
            address = normalize_address(key[len(KEY_ADDRESS_LABEL_PREFIX) :])
            if address is None:
                restored.skipped.append(key)
                continue
            restored.labels[address] = value.strip()

        elif key.startswith(KEY_SLOT_CONFIG_PREFIX):
            slot_id = _slot_from_key(key, KEY_SLOT_CONFIG_PREFIX)
            if slot_id is None:
                restored.skipped.append(key)
                continue
            try:
                config = parse_slot_config(key, value)
            except PersistenceError:
                _logger.debug("Skipping stored slot configuration %s", key, exc_info=True)
                restored.skipped.append(key)
                continue
            # The key is authoritative for which slot the record belongs to.
            config.slot_id = slot_id
            restored.configs.append(config)

    return restored


def write_records(store: KeyValueStore, records: Mapping[str, str]) -> None:
    """Write *records* and drop pairings and labels that no longer exist."""
    owned = (KEY_SLOT_ADDRESS_PREFIX, KEY_ADDRESS_LABEL_PREFIX)
    for key in list(store.keys()):
        if key.startswith(owned) and key not in records:
            store.remove(key)
    for key, value in records.items():
        store.set(key, value)

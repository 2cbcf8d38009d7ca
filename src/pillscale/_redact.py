"""Helpers for safe debug logging.

Device addresses are hardware identifiers of someone's pill scales, and raw
notification frames are easier to read as hex than as Python ``bytes``
reprs. This module prepares values before they are emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_ADDRESS_KEYS: frozenset[str] = frozenset(
    {
        "address",
        "device_address",
        "mac",
        "remote_id",
    }
)


def redact_address(address: str | None) -> str | None:
    """Keep only the last two octets of a device address."""
    if address is None:
        return None
    parts = address.split(":")
    if len(parts) >= 3:
        return ":".join(["**"] * (len(parts) - 2) + parts[-2:])
    if len(address) > 4:
        return f"…{address[-4:]}"
    return address


def hex_bytes(data: bytes | bytearray | memoryview) -> str:
    """Render *data* as space separated upper-case hex pairs."""
    return bytes(data).hex(" ").upper()


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Prepare a frame, record or string for a DEBUG line.

    Byte buffers become ``<bytes:12b CA FE ...>``, address-like keys of
    mappings are masked with :func:`redact_address` and long strings are cut.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<bytes:{len(value)}b {hex_bytes(value)}>"
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for raw_key, item in value.items():
            name = str(raw_key)
            masked = name.lower() in _ADDRESS_KEYS and isinstance(item, str)
            out[name] = redact_address(item) if masked else redact_for_log(item, max_string=max_string)
        return out
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return repr(value)

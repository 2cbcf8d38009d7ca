"""Normalization helpers.

Centralizes defensive parsing of values that arrive as free text (edited
slot targets, persisted records, replayed notification dumps).
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def clamp(value: float, lower: float, upper: float) -> float:
    return lower if value < lower else upper if value > upper else value


def normalize_address(value: Any) -> str | None:
    """Normalize a device address (BLE MAC or platform remote id).

    - Missing/blank -> None
    - Surrounding whitespace stripped, hex letters upper-cased
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text.upper()


def parse_hex_frame(text: str) -> bytes:
    """Parse a notification dump such as ``"CA FE 01 08 ..."`` or ``"cafe0108..."``.

    Separators (spaces, colons, dashes) are ignored. Raises ``ValueError``
    for anything that is not an even run of hex digits.
    """

    cleaned = "".join(ch for ch in text if ch not in " \t:-")
    if cleaned.lower().startswith("0x"):
        cleaned = cleaned[2:]
    return bytes.fromhex(cleaned)

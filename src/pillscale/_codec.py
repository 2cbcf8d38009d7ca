"""Wire codec for Hive load-cell notifications.

Frame layout (12 bytes, little-endian)::

    0-1   magic 0xCA 0xFE
    2     slot hint (u8)
    3     flags (u8): bit0 TAKEN, bit1 REMOVED, bit2 UNEXPECTED, bit3 STABLE
    4-5   delta milligrams (i16)
    6-7   weight, grams x10 (u16)
    8-9   device baseline, grams x10 (u16)
    10    firmware event code (u8)
    11    sequence (u8, wraps)

Bytes after offset 11 are ignored. Decoding performs no range checks.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable

from pillscale._constants import PACKET_LENGTH, PACKET_MAGIC, VALID_COMMANDS, WEIGHT_SCALE
from pillscale.exceptions import BadMagicError, PacketDecodeError, TooShortError
from pillscale.models.packet import TelemetryPacket

_FRAME = struct.Struct("<2sBBhHHBB")


def decode_packet(data: bytes | bytearray | memoryview | Iterable[int]) -> TelemetryPacket:
    """Decode one notification.

    Raises :class:`TooShortError` for fewer than 12 bytes and
    :class:`BadMagicError` when the frame does not start with ``CA FE``.
    """
    try:
        frame = bytes(data)
    except (TypeError, ValueError) as exc:
        raise PacketDecodeError(f"notification is not a byte sequence: {exc}") from exc
    if len(frame) < PACKET_LENGTH:
        raise TooShortError(
            f"telemetry frame needs {PACKET_LENGTH} bytes, got {len(frame)}",
            length=len(frame),
        )
    magic, slot_hint, flags, delta_mg, weight_x10, base_x10, event_code, sequence = _FRAME.unpack_from(frame)
    if magic != PACKET_MAGIC:
        raise BadMagicError(f"bad frame magic {magic.hex().upper()}", length=len(frame))

    return TelemetryPacket(
        slot_hint=slot_hint,
        flags=flags,
        delta_mg=delta_mg,
        weight_grams=weight_x10 / WEIGHT_SCALE,
        device_baseline_grams=base_x10 / WEIGHT_SCALE,
        event_code=event_code,
        sequence=sequence,
    )


def _to_u16_x10(grams: float) -> int:
    value = round(grams * WEIGHT_SCALE)
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{grams} g does not fit the u16 x10 weight field")
    return value


def encode_packet(
    *,
    slot_hint: int,
    flags: int = 0,
    delta_mg: int = 0,
    weight_grams: float = 0.0,
    device_baseline_grams: float = 0.0,
    event_code: int = 0,
    sequence: int = 0,
) -> bytes:
    """Build a frame the way the firmware does (grams quantized to 0.1 g).

    Used by replay tooling and tests; raises ``ValueError`` (or
    ``struct.error``) for values that do not fit their field.
    """
    return _FRAME.pack(
        PACKET_MAGIC,
        slot_hint,
        flags,
        delta_mg,
        _to_u16_x10(weight_grams),
        _to_u16_x10(device_baseline_grams),
        event_code,
        sequence & 0xFF,
    )


def command_payload(command: str) -> bytes:
    """Bytes to write to the control characteristic for *command* (``TARE``/``ZERO``)."""
    normalized = command.strip().upper()
    if normalized not in VALID_COMMANDS:
        raise ValueError(f"command must be one of {VALID_COMMANDS}, got {command!r}")
    return normalized.encode("ascii")

from __future__ import annotations

import pytest

from pillscale._codec import command_payload, decode_packet, encode_packet
from pillscale.exceptions import BadMagicError, PacketDecodeError, TooShortError
from pillscale.models.packet import FirmwareEvent, SlotFlag

# Slot 1, STABLE, weight 134.0 g, device baseline 134.0 g, no event, sequence 0.
STABLE_FRAME = bytes.fromhex("CA FE 01 08 00 00 3C 05 3C 05 00 00")


@pytest.mark.parametrize("length", range(12))
def test_frames_shorter_than_twelve_bytes_are_too_short(length: int) -> None:
    frame = STABLE_FRAME[:length]
    with pytest.raises(TooShortError) as excinfo:
        decode_packet(frame)
    assert excinfo.value.length == length


@pytest.mark.parametrize("magic", [b"\x00\x00", b"\xfe\xca", b"\xca\x00", b"\x00\xfe", b"\xcb\xfe"])
def test_wrong_magic_is_rejected(magic: bytes) -> None:
    with pytest.raises(BadMagicError):
        decode_packet(magic + STABLE_FRAME[2:])


def test_decode_errors_share_a_base_class() -> None:
    assert issubclass(TooShortError, PacketDecodeError)
    assert issubclass(BadMagicError, PacketDecodeError)


def test_stable_frame_decodes_every_field() -> None:
    packet = decode_packet(STABLE_FRAME)

    assert packet.slot_hint == 1
    assert packet.flags == SlotFlag.STABLE
    assert packet.stable is True
    assert packet.taken is False
    assert packet.removed is False
    assert packet.unexpected is False
    assert packet.delta_mg == 0
    assert packet.weight_grams == 134.0
    assert packet.device_baseline_grams == 134.0
    assert packet.event_code == 0
    assert packet.firmware_event == FirmwareEvent.NONE
    assert packet.sequence == 0


def test_weight_fields_are_little_endian_tenths_of_a_gram() -> None:
    # 0x050C = 1292 -> 129.2 g
    packet = decode_packet(bytes.fromhex("CA FE 01 08 00 00 0C 05 0C 05 00 00"))
    assert packet.weight_grams == pytest.approx(129.2)
    assert packet.device_baseline_grams == pytest.approx(129.2)


def test_delta_is_signed_little_endian() -> None:
    frame = bytes.fromhex("CA FE 02 01 06 FB 10 27 20 4E 01 07")
    packet = decode_packet(frame)

    assert packet.slot_hint == 2
    assert packet.taken is True
    assert packet.delta_mg == -1274
    assert packet.weight_grams == 1000.0
    assert packet.device_baseline_grams == 2000.0
    assert packet.firmware_event == FirmwareEvent.TARE_DONE
    assert packet.sequence == 7


def test_extreme_values_are_accepted_without_range_checks() -> None:
    frame = bytes.fromhex("CA FE FF FF 00 80 FF FF FF FF FF FF")
    packet = decode_packet(frame)

    assert packet.slot_hint == 255
    assert packet.flags == 0xFF
    assert packet.delta_mg == -32768
    assert packet.weight_grams == 6553.5
    assert packet.event_code == 255
    assert packet.firmware_event == FirmwareEvent.UNKNOWN
    assert packet.sequence == 255


def test_trailing_bytes_are_ignored() -> None:
    assert decode_packet(STABLE_FRAME + b"\x99\x98") == decode_packet(STABLE_FRAME)


def test_decoding_is_deterministic() -> None:
    assert decode_packet(bytearray(STABLE_FRAME)) == decode_packet(memoryview(STABLE_FRAME))
    assert decode_packet(list(STABLE_FRAME)) == decode_packet(STABLE_FRAME)


def test_non_byte_input_is_a_decode_error() -> None:
    with pytest.raises(PacketDecodeError):
        decode_packet(None)  # type: ignore[arg-type]
    with pytest.raises(PacketDecodeError):
        decode_packet([0xCA, 0xFE, 300])


@pytest.mark.parametrize(
    ("grams", "expected"),
    [(134.0, 134.0), (12.34, 12.3), (99.96, 100.0), (0.04, 0.0), (6553.5, 6553.5)],
)
def test_weights_are_quantized_to_a_tenth_of_a_gram(grams: float, expected: float) -> None:
    frame = encode_packet(slot_hint=1, weight_grams=grams, device_baseline_grams=grams)
    packet = decode_packet(frame)
    assert packet.weight_grams == pytest.approx(expected)
    assert packet.device_baseline_grams == pytest.approx(expected)


def test_encode_matches_firmware_layout() -> None:
    frame = encode_packet(slot_hint=1, flags=SlotFlag.STABLE, weight_grams=134.0, device_baseline_grams=134.0)
    assert frame == STABLE_FRAME


def test_encode_rejects_weights_outside_the_field() -> None:
    with pytest.raises(ValueError):
        encode_packet(slot_hint=1, weight_grams=-1.0)
    with pytest.raises(ValueError):
        encode_packet(slot_hint=1, weight_grams=7000.0)


def test_command_payloads_are_plain_ascii() -> None:
    assert command_payload("TARE") == b"TARE"
    assert command_payload(" zero ") == b"ZERO"
    with pytest.raises(ValueError, match="command must be one of"):
        command_payload("CALIBRATE")

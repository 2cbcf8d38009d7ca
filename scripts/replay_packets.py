#!/usr/bin/env python3
"""Replay captured Hive notifications through the slot engine.

Each input line holds one notification as hex, optionally prefixed by the
device address and separated from it by whitespace or a comma::

    CA FE 01 08 00 00 0C 05 0C 05 00 00
    AA:BB:CC:DD:EE:01,cafe010800000c050c050001

Blank lines and lines starting with ``#`` are ignored.

Usage
-----
::

    python scripts/replay_packets.py capture.txt
    python scripts/replay_packets.py --pair AA:BB:CC:DD:EE:01=3 --json < capture.txt

Options::

    --pair ADDR=SLOT     Pair a device address to a slot before replaying (repeatable)
    --medication SLOT=NAME[:MG]
                         Assign a medication to a slot (repeatable)
    --events             Also print the event log
    --json               Output as machine-readable JSON
    -v, --verbose        DEBUG logging (includes dropped packets)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pillscale import EngineConfig, Medication, SlotEngine  # noqa: E402
from pillscale.ingestion.normalize import normalize_address, parse_hex_frame, safe_float, safe_int  # noqa: E402

_logger = logging.getLogger("replay_packets")


def _parse_line(line: str) -> tuple[str | None, bytes] | None:
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    if "," in text:
        address, _, frame = text.partition(",")
        return normalize_address(address), parse_hex_frame(frame)
    head, _, rest = text.partition(" ")
    if ":" in head and rest:
        return normalize_address(head), parse_hex_frame(rest)
    return None, parse_hex_frame(text)


def _apply_pairings(engine: SlotEngine, pairs: list[str]) -> None:
    for item in pairs:
        address, _, slot_text = item.rpartition("=")
        slot_id = safe_int(slot_text)
        if not address or slot_id is None:
            raise SystemExit(f"--pair expects ADDR=SLOT, got {item!r}")
        engine.pair(address, slot_id)


def _apply_medications(engine: SlotEngine, items: list[str]) -> None:
    for item in items:
        slot_text, _, entry = item.partition("=")
        name, _, mg_text = entry.partition(":")
        slot_id = safe_int(slot_text)
        if slot_id is None or not name.strip():
            raise SystemExit(f"--medication expects SLOT=NAME[:MG], got {item!r}")
        medication = Medication.from_name(name, mg_per_pill=safe_float(mg_text) or 0.0)
        engine.add_medication(medication, assign_to=slot_id)


def _replay(engine: SlotEngine, stream: TextIO) -> tuple[int, int]:
    accepted = dropped = 0
    for lineno, line in enumerate(stream, start=1):
        try:
            parsed = _parse_line(line)
        except ValueError:
            _logger.warning("line %d: not a hex frame", lineno)
            dropped += 1
            continue
        if parsed is None:
            continue
        address, frame = parsed
        result = engine.ingest(frame, device_address=address)
        if result is None:
            dropped += 1
            continue
        accepted += 1
        if result.feedback:
            _logger.info("slot %d: %s", result.slot_id, result.feedback)
    return accepted, dropped


def _fmt(value: float | None, unit: str = "g") -> str:
    return "-" if value is None else f"{value:.3f} {unit}"


def _print_text(engine: SlotEngine, *, show_events: bool, accepted: int, dropped: int) -> None:
    print(f"packets: {accepted} accepted, {dropped} dropped")
    for snapshot in engine.snapshots():
        print(f"\n[{snapshot.slot_id}] {snapshot.display_name} - {snapshot.medication_name}")
        print(f"  status:   {snapshot.status_text}")
        print(f"  weight:   {_fmt(snapshot.smoothed_weight_grams)}")
        print(f"  dev base: {_fmt(snapshot.device_baseline_grams)}")
        print(f"  delta:    {_fmt(snapshot.delta_grams)}")
        print(f"  loss:     {_fmt(snapshot.loss_grams)}")
        print(f"  history:  {len(snapshot.history)} points")
        if snapshot.address:
            print(f"  device:   {snapshot.device_label or '-'} ({snapshot.address})")
    if show_events:
        print("\nevents:")
        for record in engine.events():
            print(f"  {record.timestamp.isoformat()} slot {record.slot_id} {record.title}: {record.detail}")


def _as_json(engine: SlotEngine, *, show_events: bool, accepted: int, dropped: int) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "accepted": accepted,
        "dropped": dropped,
        "slots": [snapshot.model_dump(mode="json", exclude={"history"}) for snapshot in engine.snapshots()],
    }
    if show_events:
        payload["events"] = [record.model_dump(mode="json") for record in engine.events()]
    return payload


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n", 1)[0])
    parser.add_argument("input", nargs="?", type=Path, help="capture file (default: stdin)")
    parser.add_argument("--pair", action="append", default=[], metavar="ADDR=SLOT")
    parser.add_argument("--medication", action="append", default=[], metavar="SLOT=NAME[:MG]")
    parser.add_argument("--events", action="store_true")
    parser.add_argument("--json", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    engine = SlotEngine(EngineConfig.from_env())
    _apply_pairings(engine, args.pair)
    _apply_medications(engine, args.medication)

    if args.input is None:
        accepted, dropped = _replay(engine, sys.stdin)
    else:
        with args.input.open(encoding="utf-8") as stream:
            accepted, dropped = _replay(engine, stream)

    if args.json:
        json.dump(_as_json(engine, show_events=args.events, accepted=accepted, dropped=dropped), sys.stdout, indent=2)
        print()
    else:
        _print_text(engine, show_events=args.events, accepted=accepted, dropped=dropped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

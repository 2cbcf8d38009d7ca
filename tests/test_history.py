from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pillscale.state.history import HistoryRing


def _dt(seconds: float = 0.0) -> datetime:
    return datetime(2026, 3, 1, 8, 0, tzinfo=UTC) + timedelta(seconds=seconds)


def test_append_returns_the_stored_point() -> None:
    ring = HistoryRing()
    point = ring.append(1, _dt(), 12.5, True)

    assert point.grams == 12.5
    assert point.stable is True
    assert ring.latest(1) == point
    assert ring.entries(1) == [point]


def test_count_cap_keeps_the_newest_points_in_order() -> None:
    ring = HistoryRing()
    for i in range(3100):
        ring.append(1, _dt(i * 0.1), float(i), False)

    entries = ring.entries(1)
    assert len(entries) == 3000
    assert entries[0].grams == 100.0
    assert entries[-1].grams == 3099.0
    assert all(a.timestamp <= b.timestamp for a, b in zip(entries, entries[1:]))


def test_entries_older_than_thirty_minutes_are_dropped() -> None:
    ring = HistoryRing()
    ring.append(1, _dt(0), 1.0, False)
    ring.append(1, _dt(60), 2.0, False)
    ring.append(1, _dt(31 * 60), 3.0, False)

    assert [p.grams for p in ring.entries(1)] == [2.0, 3.0]


def test_entry_exactly_at_the_age_limit_is_kept() -> None:
    ring = HistoryRing()
    ring.append(1, _dt(0), 1.0, False)
    ring.append(1, _dt(30 * 60), 2.0, False)

    assert [p.grams for p in ring.entries(1)] == [1.0, 2.0]


def test_slots_are_bounded_independently() -> None:
    ring = HistoryRing()
    ring.append(1, _dt(0), 1.0, False)
    ring.append(2, _dt(45 * 60), 2.0, False)

    assert len(ring.entries(1)) == 1
    assert len(ring.entries(2)) == 1
    assert len(ring) == 2


def test_clear() -> None:
    ring = HistoryRing()
    ring.append(1, _dt(), 1.0, False)
    ring.append(2, _dt(), 2.0, False)

    ring.clear(1)
    assert ring.entries(1) == []
    assert ring.latest(1) is None
    assert len(ring) == 1

    ring.clear()
    assert len(ring) == 0

from __future__ import annotations

import pytest

from pillscale.state.smoothing import EmaFilter


def test_first_sample_is_taken_verbatim() -> None:
    ema = EmaFilter()
    assert ema.update(1, 123.4) == 123.4
    assert ema.current(1) == 123.4


def test_example_sequence() -> None:
    ema = EmaFilter()
    smoothed = [ema.update(1, raw) for raw in (100.0, 100.0, 90.0)]
    assert smoothed == pytest.approx([100.0, 100.0, 98.0])


def test_slots_are_independent() -> None:
    ema = EmaFilter()
    ema.update(1, 100.0)
    assert ema.update(2, 10.0) == 10.0
    assert ema.update(1, 50.0) == pytest.approx(90.0)


def test_converges_without_overshoot() -> None:
    ema = EmaFilter()
    ema.update(1, 0.0)
    previous = 0.0
    for _ in range(200):
        value = ema.update(1, 50.0)
        assert previous <= value <= 50.0
        previous = value
    assert previous == pytest.approx(50.0)


def test_converges_downward_without_overshoot() -> None:
    ema = EmaFilter()
    ema.update(3, 200.0)
    for _ in range(200):
        value = ema.update(3, 120.0)
        assert 120.0 <= value <= 200.0
    assert ema.current(3) == pytest.approx(120.0)


def test_clear_restarts_bootstrap() -> None:
    ema = EmaFilter()
    ema.update(1, 100.0)
    ema.update(2, 100.0)

    ema.clear(1)
    assert ema.current(1) is None
    assert ema.update(1, 40.0) == 40.0
    assert ema.current(2) == 100.0

    ema.clear()
    assert ema.current(2) is None

from __future__ import annotations

import asyncio

import pytest

from pillscale import IngestResult, NotificationQueue, SlotEngine, encode_packet

ADDR_A = "AA:BB:CC:DD:EE:01"


@pytest.mark.asyncio
async def test_drain_processes_in_arrival_order() -> None:
    engine = SlotEngine()
    seen: list[IngestResult] = []
    queue = NotificationQueue(engine, on_result=seen.append)

    assert queue.submit(encode_packet(slot_hint=1, weight_grams=10.0, sequence=0))
    assert queue.submit(b"junk")
    assert queue.submit(encode_packet(slot_hint=1, weight_grams=20.0, sequence=1))
    assert queue.qsize() == 3

    results = await queue.drain()

    assert [r.packet.sequence for r in results] == [0, 1]
    assert seen == results
    state = engine.state(1)
    assert state is not None
    assert state.smoothed_weight_grams == pytest.approx(12.0)
    assert queue.qsize() == 0


@pytest.mark.asyncio
async def test_full_queue_drops_notifications() -> None:
    queue = NotificationQueue(SlotEngine(), maxsize=1)

    assert queue.submit(encode_packet(slot_hint=1)) is True
    assert queue.submit(encode_packet(slot_hint=1)) is False


@pytest.mark.asyncio
async def test_run_until_stopped() -> None:
    engine = SlotEngine()
    engine.pair(ADDR_A, 3)
    queue = NotificationQueue(engine)

    runner = asyncio.create_task(queue.run())
    queue.submit(encode_packet(slot_hint=1, weight_grams=5.0), device_address=ADDR_A)
    queue.stop()
    await asyncio.wait_for(runner, timeout=1.0)

    assert queue.is_running is False
    state = engine.state(3)
    assert state is not None
    assert state.smoothed_weight_grams == 5.0


@pytest.mark.asyncio
async def test_submit_threadsafe_from_worker_thread() -> None:
    engine = SlotEngine()
    queue = NotificationQueue(engine, loop=asyncio.get_running_loop())

    await asyncio.to_thread(queue.submit_threadsafe, encode_packet(slot_hint=2, weight_grams=7.5), ADDR_A)
    await asyncio.sleep(0)
    results = await queue.drain()

    assert [r.slot_id for r in results] == [2]
    assert results[0].device_address == ADDR_A


@pytest.mark.asyncio
async def test_stop_survives_an_intervening_drain() -> None:
    engine = SlotEngine()
    queue = NotificationQueue(engine)
    queue.submit(encode_packet(slot_hint=1, weight_grams=3.0))
    queue.stop()

    results = await queue.drain()
    assert [r.slot_id for r in results] == [1]

    await asyncio.wait_for(queue.run(), timeout=1.0)
    assert queue.is_running is False


def test_submit_threadsafe_requires_a_loop() -> None:
    queue = NotificationQueue(SlotEngine())
    with pytest.raises(RuntimeError):
        queue.submit_threadsafe(b"\xca\xfe")


@pytest.mark.asyncio
async def test_failing_callback_does_not_stop_processing() -> None:
    engine = SlotEngine()

    def _boom(result: IngestResult) -> None:
        raise RuntimeError("render failed")

    queue = NotificationQueue(engine, on_result=_boom)
    queue.submit(encode_packet(slot_hint=1, weight_grams=1.0))
    queue.submit(encode_packet(slot_hint=1, weight_grams=1.0, sequence=1))

    assert len(await queue.drain()) == 2

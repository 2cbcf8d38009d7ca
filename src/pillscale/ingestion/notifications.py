"""Serialized delivery of device notifications into the engine.

BLE stacks deliver notifications from several devices on their own
callbacks (often on another thread). This queue funnels them through a
single asyncio consumer so the engine sees one packet at a time, in
arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pillscale._redact import redact_address
from pillscale.engine import IngestResult, SlotEngine

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """Raw bytes from one device, stamped when they were received."""

    data: bytes
    device_address: str | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class NotificationQueue:
    """Single update queue in front of a :class:`SlotEngine`.

    Usage::

        queue = NotificationQueue(engine, on_result=render)
        runner = asyncio.create_task(queue.run())
        # from the transport's notify callback:
        queue.submit_threadsafe(value, device_address=mac)
    """

    def __init__(
        self,
        engine: SlotEngine,
        *,
        on_result: Callable[[IngestResult], None] | None = None,
        maxsize: int = 0,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._engine = engine
        self._on_result = on_result
        self._queue: asyncio.Queue[Notification | None] = asyncio.Queue(maxsize=maxsize)
        self._loop = loop
        self._running = False
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._running

    def qsize(self) -> int:
        return self._queue.qsize()

    def submit(self, data: bytes | bytearray, device_address: str | None = None) -> bool:
        """Enqueue a notification without blocking; returns False if it was dropped."""
        notification = Notification(data=bytes(data), device_address=device_address)
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            _logger.debug("Notification queue full; dropping packet from %s", redact_address(device_address))
            return False
        return True

    def submit_threadsafe(self, data: bytes | bytearray, device_address: str | None = None) -> None:
        """Enqueue from a thread that does not own the event loop."""
        loop = self._loop
        if loop is None:
            raise RuntimeError("submit_threadsafe needs the queue to be bound to an event loop")
        loop.call_soon_threadsafe(self.submit, bytes(data), device_address)

    def _process(self, notification: Notification) -> IngestResult | None:
        result = self._engine.ingest(
            notification.data,
            device_address=notification.device_address,
            received_at=notification.received_at,
        )
        if result is not None and self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:
                _logger.debug("on_result callback failed", exc_info=True)
        return result

    async def drain(self) -> list[IngestResult]:
        """Process every notification queued so far."""
        results: list[IngestResult] = []
        while True:
            try:
                notification = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return results
            self._queue.task_done()
            if notification is None:
                # Keep the stop request for a later run().
                self._stop_requested = True
                continue
            result = self._process(notification)
            if result is not None:
                results.append(result)

    async def run(self) -> None:
        """Consume notifications until :meth:`stop` is called."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._running = True
        try:
            if self._stop_requested:
                self._stop_requested = False
                return
            while True:
                notification = await self._queue.get()
                self._queue.task_done()
                if notification is None:
                    return
                self._process(notification)
        finally:
            self._running = False

    def stop(self) -> None:
        """Ask :meth:`run` to return once everything queued before now is processed."""
        self._queue.put_nowait(None)

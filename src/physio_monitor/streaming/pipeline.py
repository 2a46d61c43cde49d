"""Async streaming adapter connecting a reading source → session → sinks."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

import structlog

from physio_monitor.exceptions import ReadingRejected
from physio_monitor.models import Reading, SessionResult
from physio_monitor.session import MonitoringSession

logger = structlog.get_logger(__name__)


class StreamPipeline:
    """In-process async pipeline that buffers readings, runs each one through
    a :class:`MonitoringSession`, and forwards the results to registered
    consumers (charts, event log, notification dispatch).

    The session itself stays synchronous; the pipeline owns queuing and
    backpressure via an :class:`asyncio.Queue`.  A single consumer loop
    keeps the session single-writer.
    """

    def __init__(self, session: MonitoringSession, maxsize: int = 10_000) -> None:
        self._session = session
        self._queue: asyncio.Queue[Reading] = asyncio.Queue(maxsize=maxsize)
        self._consumers: list[Callable[[SessionResult], Awaitable[None]]] = []
        self._running = False
        self._processed_total = 0
        self._rejected_total = 0

    # ── Configuration ─────────────────────────────────────────

    def add_consumer(self, fn: Callable[[SessionResult], Awaitable[None]]) -> None:
        """Register an async callback that receives every session result."""
        self._consumers.append(fn)

    # ── Producer side ─────────────────────────────────────────

    async def publish(self, reading: Reading) -> None:
        """Enqueue a reading for processing."""
        await self._queue.put(reading)

    async def publish_batch(self, readings: list[Reading]) -> None:
        for r in readings:
            await self._queue.put(r)

    # ── Consumer loop ─────────────────────────────────────────

    async def start(self) -> None:
        """Start the consumer loop (run as a background task)."""
        self._running = True
        logger.info("stream_pipeline.started", consumers=len(self._consumers))

        last_stats_time = time.monotonic()

        while self._running:
            try:
                reading = await asyncio.wait_for(self._queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            try:
                result = self._session.process(reading)
            except ReadingRejected as exc:
                self._rejected_total += 1
                logger.warning(
                    "stream_pipeline.reading_rejected",
                    reason=type(exc).__name__,
                    error=str(exc),
                )
                self._queue.task_done()
                continue

            for consumer in self._consumers:
                try:
                    await consumer(result)
                except Exception as exc:
                    logger.error(
                        "stream_pipeline.consumer_error",
                        consumer=consumer.__qualname__,
                        error=str(exc),
                    )

            self._processed_total += 1
            self._queue.task_done()

            # Periodic stats every 60 seconds
            now = time.monotonic()
            if now - last_stats_time >= 60:
                logger.info(
                    "stream_pipeline.stats",
                    processed_total=self._processed_total,
                    rejected_total=self._rejected_total,
                    queue_pending=self._queue.qsize(),
                )
                last_stats_time = now

    async def stop(self) -> None:
        """Gracefully stop the consumer loop."""
        self._running = False
        logger.info("stream_pipeline.stopped")

    async def join(self) -> None:
        """Wait until every queued reading has been processed."""
        await self._queue.join()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def processed_total(self) -> int:
        return self._processed_total

    @property
    def rejected_total(self) -> int:
        return self._rejected_total

"""Tests for the streaming pipeline."""

import asyncio

import pytest

from physio_monitor.models import HealthState, SessionResult
from physio_monitor.session import MonitoringSession
from physio_monitor.streaming.pipeline import StreamPipeline


@pytest.mark.asyncio
async def test_pipeline_publish_and_consume(make_reading):
    """Readings published to the pipeline reach consumers as session results."""
    received: list[SessionResult] = []

    async def consumer(result: SessionResult) -> None:
        received.append(result)

    pipeline = StreamPipeline(MonitoringSession())
    pipeline.add_consumer(consumer)

    task = asyncio.create_task(pipeline.start())
    await pipeline.publish(make_reading(hr=80.0))

    await asyncio.sleep(0.2)
    await pipeline.stop()
    task.cancel()

    assert len(received) == 1
    assert received[0].classified.heart_rate == 80.0
    assert received[0].classified.state == HealthState.NORMAL


@pytest.mark.asyncio
async def test_pipeline_batch_keeps_order(make_reading):
    received: list[SessionResult] = []

    async def consumer(result: SessionResult) -> None:
        received.append(result)

    pipeline = StreamPipeline(MonitoringSession())
    pipeline.add_consumer(consumer)
    task = asyncio.create_task(pipeline.start())

    readings = [make_reading(hr=float(70 + i)) for i in range(5)]
    await pipeline.publish_batch(readings)

    await asyncio.wait_for(pipeline.join(), timeout=2.0)
    await pipeline.stop()
    task.cancel()

    assert [r.classified.heart_rate for r in received] == [70.0, 71.0, 72.0, 73.0, 74.0]
    assert pipeline.processed_total == 5


@pytest.mark.asyncio
async def test_pipeline_counts_rejected_and_isolates_consumers(make_reading):
    calls: list[SessionResult] = []

    async def broken(result: SessionResult) -> None:
        raise RuntimeError("sink down")

    async def healthy(result: SessionResult) -> None:
        calls.append(result)

    pipeline = StreamPipeline(MonitoringSession())
    pipeline.add_consumer(broken)
    pipeline.add_consumer(healthy)
    task = asyncio.create_task(pipeline.start())

    first = make_reading()
    await pipeline.publish_batch([first, first, make_reading()])

    await asyncio.wait_for(pipeline.join(), timeout=2.0)
    await pipeline.stop()
    task.cancel()

    assert pipeline.rejected_total == 1
    assert pipeline.processed_total == 2
    assert len(calls) == 2

"""Tests for bounded fan-out."""

import asyncio

import pytest

from serverfs.services.filesystem.concurrency import each_limit, map_limit


def test_map_limit_caps_in_flight_work():
    in_flight = 0
    peak = 0

    async def worker(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return item * 2

    results = asyncio.run(map_limit(list(range(20)), worker, limit=5))
    assert results == [item * 2 for item in range(20)]
    assert peak == 5


def test_each_limit_stops_admitting_after_failure():
    started = []

    async def worker(item):
        started.append(item)
        await asyncio.sleep(0)
        if item == 0:
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(each_limit(list(range(10)), worker, limit=1))
    assert started == [0]


def test_each_limit_waits_for_admitted_work():
    finished = []

    async def worker(item):
        if item == 0:
            await asyncio.sleep(0.001)
            raise ValueError("first")
        await asyncio.sleep(0.01)
        finished.append(item)

    with pytest.raises(ValueError):
        asyncio.run(each_limit([0, 1, 2], worker, limit=3))
    assert sorted(finished) == [1, 2]

import asyncio

import pytest

from issue_relay import maintenance


def test_periodic_task_survives_failures():
    calls = []

    async def job():
        calls.append(len(calls))
        if len(calls) == 1:
            raise RuntimeError("first run fails")

    async def scenario():
        task = await maintenance.startup(job, 0.01, name="test-job")
        await asyncio.sleep(0.1)
        await maintenance.shutdown(task)
        return task

    task = asyncio.run(scenario())
    assert len(calls) >= 2
    assert task.cancelled()


def test_startup_rejects_non_positive_interval():
    async def job():
        return None

    with pytest.raises(ValueError):
        asyncio.run(maintenance.startup(job, 0))


def test_shutdown_accepts_none():
    asyncio.run(maintenance.shutdown(None))


def test_run_immediately_runs_before_first_wait():
    calls = []

    async def job():
        calls.append("ran")

    async def scenario():
        task = await maintenance.startup(job, 3600, name="eager", run_immediately=True)
        await asyncio.sleep(0.05)
        await maintenance.shutdown(task)

    asyncio.run(scenario())
    assert calls == ["ran"]

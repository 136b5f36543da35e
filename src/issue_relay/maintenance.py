"""
Background job scheduling.

Periodic jobs (fast-cache sweeps, expired-row purges) are started with
:func:`startup` and cancelled with :func:`shutdown` when the bot closes. A
failing cycle is logged and the job keeps its schedule.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


async def _run_cycle(job: Job, name: str) -> None:
    try:
        await job()
    except Exception:
        logger.exception("%s cycle failed", name)


async def startup(
    job: Job, interval: float, *, name: str = "maintenance", run_immediately: bool = False
) -> asyncio.Task:
    """
    Run ``job`` every ``interval`` seconds in a named background task.

    :param run_immediately: Run one cycle before the first wait instead of
        after it.
    :returns: The task handle to pass to :func:`shutdown`.
    """

    if interval <= 0:
        raise ValueError("interval must be > 0")

    async def _loop() -> None:
        if run_immediately:
            await _run_cycle(job, name)
        while True:
            await asyncio.sleep(interval)
            await _run_cycle(job, name)

    logger.debug("Scheduling %s every %ss", name, interval)
    return asyncio.create_task(_loop(), name=name)


async def shutdown(task: asyncio.Task | None) -> None:
    """Cancel ``task`` and wait for it to finish; ``None`` is ignored."""

    if task is None:
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass

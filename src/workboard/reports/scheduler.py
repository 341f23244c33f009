# src/workboard/reports/scheduler.py

"""
Report scheduler.

A small interval loop that:
- fires tick() once right away,
- then every interval_seconds, until the coroutine is cancelled.

tick() is synchronous (it talks to SQLite and SMTP) and runs in a worker
thread, so a slow mail server never stalls the event loop. A tick that raises
is logged and the next one still fires on schedule.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from ..config import EIGHT_HOURS_SECONDS

logger = logging.getLogger(__name__)


async def run_report_scheduler(
        tick: Callable[[], Any],
        *,
        interval_seconds: float = EIGHT_HOURS_SECONDS,
) -> None:
    """
    Interval scheduler: Idle -> Running on start, one immediate tick, then one
    tick per interval. To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    logger.info("Report scheduler started (every %.0f s)", sleep_s)

    while True:
        started = time.monotonic()
        try:
            await asyncio.to_thread(tick)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Report tick failed")

        elapsed = time.monotonic() - started
        await asyncio.sleep(max(0.0, sleep_s - elapsed))


class ReportSchedulerThread(threading.Thread):
    """
    Runs run_report_scheduler() in its own event loop on a daemon thread.

    Used by the CLI, where the main thread belongs to the console.
    """

    def __init__(self, tick: Callable[[], Any], *, interval_seconds: float = EIGHT_HOURS_SECONDS) -> None:
        super().__init__(name="report-scheduler", daemon=True)
        self._tick = tick
        self._interval = interval_seconds
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None
        self._ready = threading.Event()

    def run(self) -> None:
        loop = asyncio.new_event_loop()
        self._loop = loop
        asyncio.set_event_loop(loop)
        try:
            self._task = loop.create_task(run_report_scheduler(self._tick, interval_seconds=self._interval))
            self._ready.set()
            loop.run_until_complete(self._task)
        except asyncio.CancelledError:
            logger.info("Report scheduler stopped.")
        finally:
            self._ready.set()
            loop.close()

    def stop(self) -> None:
        self._ready.wait(timeout=5.0)
        loop, task = self._loop, self._task
        if loop is None or task is None or loop.is_closed():
            return
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(task.cancel)

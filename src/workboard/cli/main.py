# src/workboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the report scheduler in a background thread (first report right away, then every interval),
- the admin console in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..cli.console import run_console_loop
from ..config import get_settings
from ..logging_setup import setup_logging
from ..reports.scheduler import ReportSchedulerThread

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/workboard")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "Workboard"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    scheduler = ReportSchedulerThread(
        state.lifecycle.run_daily_report,
        interval_seconds=settings.report_interval_seconds,
    )
    scheduler.start()

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running the report scheduler only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        scheduler.stop()
        scheduler.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()

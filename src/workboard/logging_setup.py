# src/workboard/logging_setup.py

"""
Logging for the admin process.

The console is shared with the REPL prompt, so it only shows what an operator
acts on: lifecycle and delivery messages from workboard.*. The report
scheduler ticks on a background thread and would interleave with typing, so
its INFO lines go to the file only. smtplib, asyncio and other libraries reach
the console at ERROR.

The file handler keeps everything at DEBUG, including the tracebacks the
dispatcher logs for failed deliveries.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "workboard.log"

# Loggers that stay off the console below WARNING.
_BACKGROUND_LOGGERS = ("workboard.reports.scheduler",)


class _ConsoleFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("workboard."):
            # py.warnings and third-party libraries
            return record.levelno >= logging.ERROR
        if name.startswith(_BACKGROUND_LOGGERS):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/workboard",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """Install console + file handlers on the root logger. Returns the log file path."""
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    # asyncio debug chatter from the scheduler thread's loop
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return log_file

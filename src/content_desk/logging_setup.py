# src/content_desk/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "content-desk.log"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console floor per logger prefix; the longest matching prefix wins.
# Anything not listed (nio, httpx, py.warnings, ...) only reaches the console at ERROR.
_CONSOLE_FLOORS: dict[str, int] = {
    "content_desk": logging.DEBUG,
    "content_desk.connectors.matrix_connector": logging.WARNING,
    "content_desk.connectors.matrix_client": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
}


def console_floor(name: str) -> int:
    best = ""
    for prefix in _CONSOLE_FLOORS:
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > len(best):
            best = prefix
    return _CONSOLE_FLOORS[best] if best else logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    """Per-request access lines and Matrix sync chatter stay in the file log only."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_floor(record.name)


def _with_format(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/content-desk",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route every logger to stderr (filtered) and to <log_dir>/content-desk.log (everything).

    Safe to call again: existing root handlers are replaced. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = _with_format(logging.StreamHandler(sys.stderr), console_level)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)
    root.addHandler(_with_format(logging.FileHandler(str(log_file), encoding="utf-8"), file_level))

    # uvicorn installs nothing of its own (log_config=None); let its records reach root.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).propagate = True

    logging.captureWarnings(True)
    return log_file

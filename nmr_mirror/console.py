"""
Console and run-log output.

One named logger per process. The dated run log is always plain text; the
console colours the action tag (COPY, RECORD, DROP, ...) when stdout is a
terminal, and whole lines red at ERROR and above.
"""

from __future__ import annotations

import datetime as dt
import logging
import sys
from pathlib import Path

try:
    from colorama import init as colorama_init  # type: ignore
except Exception:  # pragma: no cover
    colorama_init = None

LOGGER_NAME = "nmr_mirror"

RESET = "\x1b[0m"
RED = "\x1b[31m"

ACTION_COLORS = {
    "COPY": "\x1b[32m",
    "COPIED": "\x1b[32m",
    "DONE": "\x1b[32m",
    "RECORD": "\x1b[36m",
    "DROP": "\x1b[38;5;208m",
    "SKIP": "\x1b[38;5;208m",
    "SCAN": "\x1b[33m",
    "CANDIDATE": "\x1b[33m",
}


class ActionFormatter(logging.Formatter):
    def __init__(self, use_color: bool, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if not self.use_color:
            return base
        if record.levelno >= logging.ERROR:
            return f"{RED}{base}{RESET}"

        action = getattr(record, "action", None)
        color = ACTION_COLORS.get(action or "")
        if color:
            base = base.replace(action, f"{color}{action}{RESET}", 1)
        return base


def setup_logger(log_dir: Path, level: int = logging.INFO) -> logging.Logger:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{LOGGER_NAME}_{dt.date.today().isoformat()}.log"

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        return logger

    if colorama_init:
        colorama_init()

    fmt = "%(asctime)s | %(levelname)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))

    ch = logging.StreamHandler(sys.stdout)
    use_color = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    ch.setFormatter(ActionFormatter(use_color=use_color, fmt=fmt, datefmt=datefmt))

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.info("Logging to: %s", log_path)
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def log_action(logger: logging.Logger, action: str, message: str, level: int = logging.INFO) -> None:
    logger.log(level, f"{action} | {message}", extra={"action": action})

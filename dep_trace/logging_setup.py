"""
Logging bootstrap for the dep-trace CLI.
Console output goes through Rich on stderr; an optional JSONL sink records
every event for later inspection.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_PATH = os.environ.get("DEP_TRACE_LOG_PATH")
DEFAULT_LEVEL = os.environ.get("DEP_TRACE_LOG_LEVEL", "DEBUG").upper()

_RESERVED_ATTRS = frozenset(
    (
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    )
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            base = {
                "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
                "lvl": record.levelname,
                "schema": {"name": "dep-trace.log", "ver": "1.0.0"},
                "logger": record.name,
                "message": record.getMessage(),
            }
            # Attach any extra fields on the record
            for k, v in record.__dict__.items():
                if k in _RESERVED_ATTRS:
                    continue
                base.setdefault(k, v)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(base, ensure_ascii=False, default=str) + "\n")
        except Exception:
            self.handleError(record)


def init_logging(verbose: bool = False, log_path: str | None = None, level: str | None = None) -> None:
    """Configure the dep_trace logger.

    Args:
        verbose: Show DEBUG records on the console (WARNING and up otherwise)
        log_path: JSONL sink path (DEP_TRACE_LOG_PATH when omitted, no sink if neither)
        level: Level for the JSONL sink (DEP_TRACE_LOG_LEVEL, default DEBUG)
    """
    log_path = log_path or DEFAULT_PATH
    level = (level or DEFAULT_LEVEL).upper()

    logger = logging.getLogger("dep_trace")
    logger.setLevel(logging.DEBUG)
    # Remove handlers from a previous call to avoid duplicates
    for h in list(logger.handlers):
        if isinstance(h, (JsonlHandler, RichHandler)):
            logger.removeHandler(h)

    console_handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(console_handler)

    if log_path:
        file_handler = JsonlHandler(log_path)
        file_handler.setLevel(getattr(logging, level, logging.DEBUG))
        logger.addHandler(file_handler)

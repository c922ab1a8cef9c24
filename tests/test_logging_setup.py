"""Tests for logging bootstrap."""

import json
import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from dep_trace.logging_setup import JsonlHandler
from dep_trace.logging_setup import init_logging


@pytest.fixture(autouse=True)
def clean_dep_trace_logger():
    yield
    logger = logging.getLogger("dep_trace")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="dep_trace.search",
        level=logging.INFO,
        pathname="search.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_jsonl_handler_writes_record(tmp_path: Path):
    path = tmp_path / "nested" / "log.jsonl"
    handler = JsonlHandler(path)

    handler.emit(_make_record("visited 3 packages", target="pkg-a", location=Path("/app")))

    entry = json.loads(path.read_text().strip())
    assert entry["lvl"] == "INFO"
    assert entry["logger"] == "dep_trace.search"
    assert entry["message"] == "visited 3 packages"
    assert entry["target"] == "pkg-a"
    assert entry["location"] == "/app"
    assert "lineno" not in entry


def test_jsonl_handler_appends(tmp_path: Path):
    path = tmp_path / "log.jsonl"
    handler = JsonlHandler(path)

    handler.emit(_make_record("one"))
    handler.emit(_make_record("two"))

    assert [json.loads(line)["message"] for line in path.read_text().splitlines()] == ["one", "two"]


def test_init_logging_console_only(monkeypatch):
    monkeypatch.setattr("dep_trace.logging_setup.DEFAULT_PATH", None)
    init_logging(verbose=False)

    handlers = logging.getLogger("dep_trace").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert handlers[0].level == logging.WARNING


def test_init_logging_verbose_with_file(tmp_path: Path):
    init_logging(verbose=True, log_path=str(tmp_path / "log.jsonl"))

    handlers = logging.getLogger("dep_trace").handlers
    rich_handlers = [h for h in handlers if isinstance(h, RichHandler)]
    assert rich_handlers[0].level == logging.DEBUG
    assert any(isinstance(h, JsonlHandler) for h in handlers)


def test_init_logging_is_idempotent(tmp_path: Path):
    init_logging(log_path=str(tmp_path / "log.jsonl"))
    init_logging(log_path=str(tmp_path / "log.jsonl"))

    assert len(logging.getLogger("dep_trace").handlers) == 2

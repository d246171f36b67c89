from __future__ import annotations

import json
import logging
import subprocess
import sys
from pathlib import Path

from px import tools
from px.logging import JsonFormatter, get_logger


def _record(msg: str, **extra) -> logging.LogRecord:
    logger = logging.getLogger("px.test")
    return logger.makeRecord("px.test", logging.INFO, __file__, 1, msg, (), None, extra=extra)


def test_formatter_keeps_px_context_as_fields() -> None:
    record = _record("lock up-to-date", lock=Path("/p/requirements.lock"), argv=["uv", "pip", "sync"])
    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "px.test"
    assert payload["msg"] == "lock up-to-date"
    assert payload["lock"] == "/p/requirements.lock"
    assert payload["argv"] == ["uv", "pip", "sync"]
    assert "returncode" not in payload
    assert payload["ts"].endswith("+00:00")


def test_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("px.test").makeRecord(
            "px.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )
    payload = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["error"]


def test_level_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("PX_LOG_LEVEL", "debug")
    logger = get_logger("px.test.level")
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert len(get_logger("px.test.level").handlers) == 1


def test_run_logs_argv_and_returncode(monkeypatch) -> None:
    records: list[logging.LogRecord] = []

    class Collect(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    monkeypatch.setattr(subprocess, "run", lambda argv, **kw: subprocess.CompletedProcess(argv, 3))
    handler = Collect()
    previous = tools.log.level
    tools.log.addHandler(handler)
    tools.log.setLevel(logging.DEBUG)
    try:
        proc = tools.run(["uv", Path("pip"), "sync"], check=False)
    finally:
        tools.log.removeHandler(handler)
        tools.log.setLevel(previous)

    assert proc.returncode == 3
    assert [r.argv for r in records] == [["uv", "pip", "sync"], ["uv", "pip", "sync"]]
    assert records[-1].returncode == 3

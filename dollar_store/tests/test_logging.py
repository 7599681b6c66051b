from __future__ import annotations

import io
import json
import logging

import pytest

from dollar_store import logging as dlog


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    dlog.clear_context()
    yield
    dlog.clear_context()
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def _lines(buf: io.StringIO):
    return [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]


def test_json_lines_carry_bound_context():
    buf = io.StringIO()
    dlog.configure(json=True, level="DEBUG", stream=buf)
    dlog.bind(component="controller", account=b"\x01\x02")
    dlog.get_logger("dollar_store.test").info("minted %d", 3, extra={"unit_id": 3})

    (rec,) = _lines(buf)
    assert rec["msg"] == "minted 3"
    assert rec["level"] == "INFO"
    assert rec["logger"] == "dollar_store.test"
    assert rec["component"] == "controller"
    assert rec["account"] == "0x0102"
    assert rec["unit_id"] == 3


def test_level_filters():
    buf = io.StringIO()
    dlog.configure(json=True, level="WARNING", stream=buf)
    log = dlog.get_logger()
    log.info("quiet")
    log.warning("loud")
    assert [r["msg"] for r in _lines(buf)] == ["loud"]


def test_trace_scope_restores_context():
    dlog.bind(component="outer")
    with dlog.trace_scope("abc123"):
        assert dlog.context()["trace_id"] == "abc123"
        dlog.bind(account="x")
    assert dlog.context() == {"component": "outer"}


def test_trace_scope_generates_an_id():
    with dlog.trace_scope():
        tid = dlog.context()["trace_id"]
    assert len(tid) == 12
    assert "trace_id" not in dlog.context()


def test_with_fields_adapter():
    buf = io.StringIO()
    dlog.configure(json=True, level="INFO", stream=buf)
    adapter = dlog.with_fields(dlog.get_logger(), scenario="e2e")
    adapter.info("step", extra={"tx_index": 4})
    (rec,) = _lines(buf)
    assert rec["scenario"] == "e2e"
    assert rec["tx_index"] == 4


def test_text_format_has_context_and_message():
    buf = io.StringIO()
    dlog.configure(json=False, level="INFO", stream=buf)
    with dlog.trace_scope("t-1"):
        dlog.get_logger("dollar_store.kids").info("mint enabled")
    line = buf.getvalue().strip()
    assert "| INFO" in line
    assert "trace_id=t-1" in line
    assert line.endswith("| mint enabled")


def test_env_format_override(monkeypatch):
    monkeypatch.setenv("DSK_LOG_FORMAT", "json")
    buf = io.StringIO()
    dlog.configure(level="INFO", stream=buf)
    dlog.get_logger().info("hello")
    assert _lines(buf)[0]["msg"] == "hello"

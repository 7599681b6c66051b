"""
dollar_store.logging
--------------------

Structured logging with:
- JSON or concise colored text formats
- Context-local fields via `contextvars` (trace_id, component, scenario, account, tx_index)
- Safe JSON serialization (bytes → hex, Paths → str, dataclasses → dicts)
- Helpers to bind/unbind context fields and generate trace IDs

Usage
-----
    from dollar_store import logging as dlog

    dlog.configure(json=False, level="INFO")  # once at process start
    log = dlog.get_logger(__name__)

    with dlog.trace_scope():
        dlog.bind(component="simulate")
        log.info("stack deployed")

Format is chosen by DSK_LOG_FORMAT=(json|text) when not given explicitly, the
level by DSK_LOG_LEVEL.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import traceback
import types
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

# ----------------------------
# Context
# ----------------------------

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_LOG_CONTEXT", default={})

DEFAULT_CONTEXT_KEYS = (
    "trace_id",
    "component",
    "scenario",
    "account",
    "tx_index",
)

_RECORD_ATTRS = frozenset(
    (
        "name",
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
        "message",
        "asctime",
    )
)


def context() -> Dict[str, Any]:
    """Return a *copy* of the active logging context."""
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    """Merge fields into the active context."""
    cur = dict(_LOG_CONTEXT.get())
    cur.update({k: _coerce_value(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def unbind(*keys: str) -> None:
    cur = dict(_LOG_CONTEXT.get())
    for k in keys:
        cur.pop(k, None)
    _LOG_CONTEXT.set(cur)


def clear_context() -> None:
    _LOG_CONTEXT.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None):
    """
    Ensure a trace_id is present for the duration of the scope.
    Restores prior context on exit.
    """
    prev = dict(_LOG_CONTEXT.get())
    try:
        bind(trace_id=trace_id or short_uuid())
        yield
    finally:
        _LOG_CONTEXT.set(prev)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


# ----------------------------
# JSON & Text formatters
# ----------------------------


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, _dt.datetime):
        if v.tzinfo is None:
            v = v.replace(tzinfo=_dt.timezone.utc)
        return v.isoformat()
    if is_dataclass(v) and not isinstance(v, type):
        return asdict(v)
    return str(v)


class _SafeJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:  # type: ignore[override]
        return _coerce_value(o)


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


_LEVEL_TO_INT = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

ANSI = types.SimpleNamespace(
    RESET="\x1b[0m",
    BOLD="\x1b[1m",
    FG=types.SimpleNamespace(
        RED="\x1b[31m",
        GREEN="\x1b[32m",
        YELLOW="\x1b[33m",
        MAGENTA="\x1b[35m",
        CYAN="\x1b[36m",
        GREY="\x1b[90m",
        WHITE="\x1b[37m",
    ),
)

_LEVEL_COLOR = {
    logging.DEBUG: ANSI.FG.GREY,
    logging.INFO: ANSI.FG.GREEN,
    logging.WARNING: ANSI.FG.YELLOW,
    logging.ERROR: ANSI.FG.RED,
    logging.CRITICAL: ANSI.BOLD + ANSI.FG.MAGENTA,
}


def _supports_color(stream: io.TextIOBase) -> bool:
    try:
        return stream.isatty() and os.environ.get("NO_COLOR") is None
    except (AttributeError, ValueError):
        return False


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RECORD_ATTRS
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(context())
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, cls=_SafeJSONEncoder, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2026-01-05T12:34:56.789+00:00 | INFO  | dollar_store.kids.controller | trace_id=abc123 | mint enabled
    With colors when supported.
    """

    def __init__(self, stream: io.TextIOBase):
        super().__init__()
        self._color = _supports_color(stream)

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        ctx_str = " ".join(f"{k}={ctx[k]}" for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None)
        extras = " ".join(f"{k}={v}" for k, v in _extras(record).items() if k not in ctx)

        lvl = f"{record.levelname:<5}"
        name = record.name
        ts = _utcnow_iso()
        if self._color:
            lvl = f"{_LEVEL_COLOR.get(record.levelno, ANSI.FG.WHITE)}{lvl}{ANSI.RESET}"
            name = f"{ANSI.FG.CYAN}{name}{ANSI.RESET}"
            ts = f"{ANSI.FG.GREY}{ts}{ANSI.RESET}"
            if ctx_str:
                ctx_str = f"{ANSI.FG.GREY}{ctx_str}{ANSI.RESET}"

        line = f"{ts} | {lvl} | {name}"
        if ctx_str:
            line += f" | {ctx_str}"
        if extras:
            line += f" {extras}"
        line += f" | {record.getMessage()}"

        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


# ----------------------------
# Public setup API
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: Optional[str | int] = None,
    stream: Optional[io.TextIOBase] = None,
    file_path: Optional[Path | str] = None,
) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    json : bool | None
        If None, determined by env DSK_LOG_FORMAT=(json|text) and TTY detection.
    level : str | int | None
        Minimum log level; defaults to DSK_LOG_LEVEL or INFO.
    stream : TextIO
        Stream for console handler (default: the current sys.stderr).
    file_path : Path | str | None
        Optional path to additionally write JSON logs to.
    """
    stream = stream if stream is not None else sys.stderr
    chosen_json = _decide_json(json, stream)
    lvl = _coerce_level(level if level is not None else os.environ.get("DSK_LOG_LEVEL", "INFO"))

    root = logging.getLogger()
    root.setLevel(lvl)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler(stream)
    console.setLevel(lvl)
    console.setFormatter(JSONFormatter() if chosen_json else TextFormatter(stream))
    root.addHandler(console)

    if file_path:
        p = Path(file_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


def setup_logging(*, level: str | int = "INFO", fmt: str = "text", file: Optional[Path | str] = None) -> None:
    """
    Configure logging from CLI flags. DSK_LOG_FORMAT takes precedence over `fmt`.
    """
    override = _env_json_override()
    chosen_json = override if override is not None else fmt.strip().lower() == "json"
    configure(json=chosen_json, level=level, file_path=file)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "dollar_store")


def with_fields(logger: logging.Logger, **fields: Any) -> "ContextAdapter":
    """Return a logger adapter that injects constant fields on each call."""
    return ContextAdapter(logger, extra={k: _coerce_value(v) for k, v in fields.items()})


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter merging its constant fields with call-site `extra`."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**self.extra, **extra}
        return msg, kwargs


# ----------------------------
# Internals
# ----------------------------


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVEL_TO_INT.get(level.upper(), logging.INFO)


def _decide_json(json_flag: Optional[bool], stream: io.TextIOBase) -> bool:
    if json_flag is not None:
        return json_flag
    override = _env_json_override()
    if override is not None:
        return override
    # JSON when not interactive
    return not _supports_color(stream)


def _env_json_override() -> Optional[bool]:
    env = os.environ.get("DSK_LOG_FORMAT", "").strip().lower()
    if env == "json":
        return True
    if env == "text":
        return False
    return None


__all__ = [
    "ContextAdapter",
    "JSONFormatter",
    "TextFormatter",
    "bind",
    "clear_context",
    "configure",
    "context",
    "get_logger",
    "setup_logging",
    "short_uuid",
    "trace_scope",
    "unbind",
    "with_fields",
]

"""
ICPR — icpr.logging
-------------------

Structured logging for the ledger host and tools:
- JSON or concise text formats
- Context-local fields via `contextvars` (chain_id, contract, component, ...)
- Safe JSON serialization (bytes → 0x-hex, Paths → str)
- Standard library only; library modules just do
  `log = logging.getLogger(__name__)` and never touch the root logger.

Usage
-----
    from icpr import logging as ilog

    ilog.configure(json=False, level="DEBUG")   # once, in an application or test session
    ilog.bind(component="relayer")

The host binds `chain_id` and `contract` around each call, so every line it
emits carries them.
"""

from __future__ import annotations

import datetime as _dt
import io
import json as _json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

# ----------------------------
# Context
# ----------------------------

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_ICPR_LOG_CONTEXT", default={})

DEFAULT_CONTEXT_KEYS = ("chain_id", "contract", "component", "block")

ROOT_LOGGER = "icpr"


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


@contextmanager
def scope(**fields: Any) -> Iterator[None]:
    """Bind `fields` for the duration of the scope, then restore the prior context."""
    prev = _LOG_CONTEXT.set(dict(_LOG_CONTEXT.get()))
    try:
        bind(**fields)
        yield
    finally:
        _LOG_CONTEXT.reset(prev)


# ----------------------------
# JSON & Text formatters
# ----------------------------

_RECORD_FIELDS = frozenset(
    (
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "taskName", "message", "asctime",
    )
)


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, (list, tuple)):
        return [_coerce_value(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _coerce_value(x) for k, x in v.items()}
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RECORD_FIELDS
    }


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


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
            payload["err"] = self.formatException(record.exc_info)
        return _json.dumps(payload, separators=(",", ":"), sort_keys=False)


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2026-01-05T12:34:56.789+00:00 | INFO  | icpr.runtime.host | chain_id=31337 | deployed
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        ctx_str = " ".join(f"{k}={ctx[k]}" for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None)
        extras = " ".join(f"{k}={v}" for k, v in _extras(record).items() if k not in ctx)

        line = f"{_utcnow_iso()} | {record.levelname:<5} | {record.name}"
        if ctx_str:
            line += f" | {ctx_str}"
        line += f" | {record.getMessage()}"
        if extras:
            line += f" {extras}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ----------------------------
# Public setup API
# ----------------------------


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure(
    *,
    json: bool = False,
    level: str | int = "INFO",
    stream: io.TextIOBase = sys.stderr,  # type: ignore[assignment]
) -> logging.Logger:
    """
    Configure the `icpr` logger (not the root logger): one stream handler with
    the JSON or text formatter. Safe to call repeatedly; handlers are replaced.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(_coerce_level(level))
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter() if json else TextFormatter())
    logger.addHandler(handler)
    return logger


def configure_from_config(cfg: Any, stream: Optional[io.TextIOBase] = None) -> logging.Logger:
    """Configure from a `icpr.config.HostConfig`."""
    return configure(json=bool(cfg.log_json), level=cfg.log_level, stream=stream or sys.stderr)  # type: ignore[arg-type]


__all__ = [
    "DEFAULT_CONTEXT_KEYS",
    "context",
    "bind",
    "unbind",
    "scope",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "configure_from_config",
]

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from .context import get_context

_LEVEL_COLORS = {
    "TRACE": "\033[90m",
    "DEBUG": "\033[37m",
    "INFO": "\033[36m",
    "SUCCESS": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

# Context keys promoted to top-level fields of every record.
_PROMOTED = ("continent", "region")


def _record_metadata(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.created)),
        "level": record.levelname,
        "service": getattr(record, "service", None),
        "logger": record.name,
        "function": record.funcName,
        "line_number": record.lineno,
    }


def _split_context(record: logging.LogRecord) -> tuple[Dict[str, Any], Dict[str, Any]]:
    snapshot = getattr(record, "log_context", None)
    ctx = dict(snapshot) if snapshot is not None else get_context()
    promoted = {k: ctx.pop(k) for k in _PROMOTED if k in ctx}
    return promoted, ctx


class ConsoleFormatter(logging.Formatter):
    """Single colored line: time | level | service | where | [continent/region] message."""

    def format(self, record: logging.LogRecord) -> str:
        md = _record_metadata(record)
        promoted, ctx = _split_context(record)
        scope = "/".join(str(promoted[k]) for k in _PROMOTED if k in promoted)
        message = record.getMessage()
        if scope:
            message = f"[{scope}] {message}"
        parts = [
            md["timestamp"],
            md["level"],
            md["service"] or "-",
            f"{md['logger']}:{md['function']}:{md['line_number']}",
            message,
        ]
        exec_ms = getattr(record, "execution_time_ms", None)
        if exec_ms is not None:
            parts.append(f"t={exec_ms}ms")
        if ctx:
            parts.append(str(ctx))
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))
        color = _LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{' | '.join(parts)}{_RESET}"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, suitable for the rotating ``.jsonl`` file."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = _record_metadata(record)
        payload["message"] = record.getMessage()
        promoted, ctx = _split_context(record)
        payload.update(promoted)
        if ctx:
            payload["context"] = ctx
        exec_ms = getattr(record, "execution_time_ms", None)
        if exec_ms is not None:
            payload["execution_time_ms"] = exec_ms
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))

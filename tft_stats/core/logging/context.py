"""Per-task logging context.

Values live in a ContextVar, so every asyncio task started inside a
``log_context`` block (one per continent, one per region) carries its own
copy and records from concurrent regions never mix their fields.
"""
from __future__ import annotations

import contextvars
from typing import Any, Dict

_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("tft_log_context", default={})


def get_context() -> Dict[str, Any]:
    return dict(_context.get())


def bind(**values: Any) -> None:
    current = dict(_context.get())
    current.update({k: v for k, v in values.items() if v is not None})
    _context.set(current)


def unbind(*keys: str) -> None:
    current = dict(_context.get())
    for k in keys:
        current.pop(k, None)
    _context.set(current)


class log_context(object):
    """Bind fields (``region``, ``continent``, ...) for the duration of a block."""

    def __init__(self, **values: Any) -> None:
        self._values = values
        self._token = None

    def __enter__(self) -> Dict[str, Any]:
        current = dict(_context.get())
        current.update({k: v for k, v in self._values.items() if v is not None})
        self._token = _context.set(current)
        return current

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._token is not None:
            _context.reset(self._token)
        return False

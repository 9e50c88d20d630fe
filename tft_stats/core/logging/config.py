from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler, QueueHandler, QueueListener
from queue import Queue
from pathlib import Path
from typing import Optional

from .context import get_context
from .levels import register_levels, to_level
from .formatter import ConsoleFormatter, JSONFormatter

_listener: QueueListener | None = None


def bootstrap_logging(
    *,
    service: str = "tft-stats",
    level: str | int | None = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "tft_stats.jsonl",
    console: bool | None = None,
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> None:
    """Configure the root logger once per process.

    Console output is opt-in (``LOG_CONSOLE=true``) because the CLI draws its
    own progress lines; the JSON file handler runs behind a queue so slow
    disk writes never block the event loop.
    """
    global _listener
    shutdown_logging()
    register_levels()
    root = logging.getLogger()
    root.handlers.clear()
    lvl = to_level(level or os.getenv("LOG_LEVEL", "INFO"))
    root.setLevel(lvl)

    if console is None:
        console = os.getenv("LOG_CONSOLE", "false").strip().lower() == "true"
    if console:
        stream = logging.StreamHandler()
        console_level = os.getenv("LOG_CONSOLE_LEVEL", "")
        stream.setLevel(to_level(console_level) if console_level else lvl)
        stream.setFormatter(ConsoleFormatter())
        stream.addFilter(_ServiceFilter(service))
        root.addHandler(stream)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        json_handler = RotatingFileHandler(
            str(log_dir / log_file_name), maxBytes=max_bytes, backupCount=backup_count
        )
        json_handler.setLevel(lvl)
        json_handler.setFormatter(JSONFormatter())
        q: Queue[logging.LogRecord] = Queue(-1)
        qh = QueueHandler(q)
        qh.addFilter(_ServiceFilter(service))
        root.addHandler(qh)
        _listener = QueueListener(q, json_handler, respect_handler_level=True)
        _listener.start()


def shutdown_logging() -> None:
    global _listener
    if _listener:
        _listener.stop()
        _listener = None


class _ServiceFilter(logging.Filter):
    """Stamp the service name and the calling task's context onto each record.

    Runs in the emitting thread, so the queue listener thread formats the
    context of the task that logged rather than its own.
    """

    def __init__(self, service: str) -> None:
        super().__init__()
        self._service = service

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "service", None):
            record.service = self._service
        if not hasattr(record, "log_context"):
            record.log_context = get_context()
        return True

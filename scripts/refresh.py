from __future__ import annotations

import asyncio

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from tft_stats.core.logging import bootstrap_logging, shutdown_logging
from tft_stats.config import settings
from tft_stats.presentation.cli import RefreshCommand


def main() -> int:
    bootstrap_logging(service="refresh", level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_file_name="refresh.jsonl")
    try:
        return asyncio.run(RefreshCommand().run())
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main())

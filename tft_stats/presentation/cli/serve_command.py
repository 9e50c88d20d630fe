from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from tft_stats.config import settings
from tft_stats.core.logging import get_logger


class ServeCommand:
    """Serves the read API with uvicorn."""

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        self.log = get_logger(__name__, service="api")
        self.host = host or settings.API_HOST
        self.port = port or settings.API_PORT

    @classmethod
    def from_argv(cls, argv: Optional[List[str]] = None) -> "ServeCommand":
        parser = argparse.ArgumentParser(description="Serve the TFT stats API")
        parser.add_argument("--host", default=None)
        parser.add_argument("--port", type=int, default=None)
        args = parser.parse_args(argv)
        return cls(host=args.host, port=args.port)

    def run(self) -> None:
        from tft_stats.presentation.api import create_app

        settings.create_directories()
        self.log.info(lambda: f"serve {self.host}:{self.port}")
        print(f"Serving API on http://{self.host}:{self.port} (Ctrl+C to stop)", flush=True)
        uvicorn.run(create_app(), host=self.host, port=self.port, log_config=None)

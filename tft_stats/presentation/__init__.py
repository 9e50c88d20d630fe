"""Presentation layer - CLI commands and HTTP API."""
from .cli import RefreshCommand, RegionStatusCommand, ServeCommand

__all__ = [
    "RefreshCommand",
    "RegionStatusCommand",
    "ServeCommand",
]

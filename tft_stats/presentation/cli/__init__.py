"""Presentation CLI exports."""
from .refresh_command import RefreshCommand
from .region_status_command import RegionStatusCommand
from .serve_command import ServeCommand

__all__ = [
    "RefreshCommand",
    "RegionStatusCommand",
    "ServeCommand",
]

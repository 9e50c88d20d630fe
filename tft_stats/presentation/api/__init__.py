"""HTTP API exports."""
from .app import create_app

__all__ = ["create_app"]

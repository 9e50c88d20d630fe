"""Application use cases."""
from .refresh_stats import RefreshStatsUseCase, run_refresh

__all__ = [
    'RefreshStatsUseCase',
    'run_refresh',
]

"""Application layer - Services and use cases."""
from .services import ContinentFetcher, RegionProcessor
from .use_cases import RefreshStatsUseCase, run_refresh

__all__ = [
    'ContinentFetcher',
    'RegionProcessor',
    'RefreshStatsUseCase',
    'run_refresh',
]

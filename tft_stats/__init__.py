"""
TFT Stats Pipeline
==================

Collects high-elo Teamfight Tactics matches from every Riot platform and
publishes composition, unit, trait and item statistics per region.

Features:
- Clean Architecture (Domain → Infrastructure → Application → Presentation)
- Async API calls with sliding-window rate limiting per continent and region
- Parallel continent fetching with per-region status tracking
- Weighted aggregation of compositions, units, traits and items
- Read-only HTTP API over the latest snapshots

Version: 1.0.0
"""

__version__ = "1.0.0"

from .domain import (
    Composition, ProcessedData, ProcessedMatch,
    Continent, EntityType, Region, RegionStatus,
)

from .infrastructure import (
    RiotAPIClient,
    RateLimitRegistry,
    SqliteStatsRepository,
    GameAssetCatalog,
)

from .application import (
    ContinentFetcher,
    RegionProcessor,
    RefreshStatsUseCase,
    run_refresh,
)

from .config import settings

__all__ = [
    # Version info
    '__version__',

    # Domain
    'Composition',
    'ProcessedData',
    'ProcessedMatch',
    'Continent',
    'EntityType',
    'Region',
    'RegionStatus',

    # Infrastructure
    'RiotAPIClient',
    'RateLimitRegistry',
    'SqliteStatsRepository',
    'GameAssetCatalog',

    # Application
    'ContinentFetcher',
    'RegionProcessor',
    'RefreshStatsUseCase',
    'run_refresh',

    # Config
    'settings',
]

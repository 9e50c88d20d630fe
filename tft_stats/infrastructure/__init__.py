"""Infrastructure layer - API clients, repositories and asset mapping."""
from .api import FetchOptions, RateLimiter, RateLimitRegistry, RiotAPIClient, RiotCredentialError
from .mapping import GameAssetCatalog
from .repositories import SqliteStatsRepository, StatsRepositoryError

__all__ = [
    'FetchOptions',
    'RateLimiter',
    'RateLimitRegistry',
    'RiotAPIClient',
    'RiotCredentialError',
    'GameAssetCatalog',
    'SqliteStatsRepository',
    'StatsRepositoryError',
]

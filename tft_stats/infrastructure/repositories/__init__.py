"""Infrastructure repositories module."""
from .stats_repository import SqliteStatsRepository, StatsRepositoryError

__all__ = [
    'SqliteStatsRepository',
    'StatsRepositoryError',
]

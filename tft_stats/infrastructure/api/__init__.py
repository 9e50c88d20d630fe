"""Infrastructure API module."""
from .riot_client import LEAGUE_TIERS, FetchOptions, RiotAPIClient, RiotCredentialError
from .rate_limiter import RateLimiter, RateLimitRegistry

__all__ = [
    'LEAGUE_TIERS',
    'FetchOptions',
    'RiotAPIClient',
    'RiotCredentialError',
    'RateLimiter',
    'RateLimitRegistry',
]

"""Application services root exports."""
from .aggregation_service import extract_items, extract_traits, extract_units
from .continent_fetcher import ContinentFetcher
from .leaderboard_service import LeaderboardService
from .match_processing_service import process_match_data
from .region_processor import RegionProcessor
from .sanitizer import sanitize_for_database
from .stats_publisher import save_entity_data

__all__ = [
    "extract_items",
    "extract_traits",
    "extract_units",
    "ContinentFetcher",
    "LeaderboardService",
    "process_match_data",
    "RegionProcessor",
    "sanitize_for_database",
    "save_entity_data",
]

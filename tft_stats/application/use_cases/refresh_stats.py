"""Use case for the scheduled stats refresh."""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional, Protocol

from tft_stats.config import settings
from tft_stats.core.logging import get_logger, timed
from tft_stats.domain.entities import ProcessedMatch
from tft_stats.domain.enums import EntityType
from tft_stats.domain.interfaces import IStatsRepository
from tft_stats.infrastructure.api import RiotAPIClient
from tft_stats.infrastructure.mapping import GameAssetCatalog
from tft_stats.infrastructure.repositories import SqliteStatsRepository
from tft_stats.application.services.continent_fetcher import ContinentFetcher
from tft_stats.application.services.match_processing_service import process_match_data
from tft_stats.application.services.region_processor import RegionProcessor
from tft_stats.application.services.stats_publisher import save_entity_data

logger = get_logger(__name__, service="refresh")

GLOBAL_REGION = "all"


class MatchSource(Protocol):
    async def process_all_continents_in_parallel(self, matches_per_region: int) -> list[ProcessedMatch]: ...


class RefreshStatsUseCase:
    """
    Fetch fresh matches from every continent, rebuild all snapshots and
    prune old data.

    Snapshots are rebuilt from scratch each run: the global (``all``)
    snapshot first, then one per region that produced compositions.
    """

    def __init__(
        self,
        repository: IStatsRepository,
        match_source: MatchSource,
        catalog: Optional[GameAssetCatalog] = None,
        matches_per_region: int = settings.MATCHES_PER_REGION,
        min_matches: int = settings.MIN_MATCHES_FOR_GLOBAL,
        retention_days: int = settings.RETENTION_DAYS,
    ):
        self.repository = repository
        self.match_source = match_source
        self.catalog = catalog or GameAssetCatalog()
        self.matches_per_region = matches_per_region
        self.min_matches = min_matches
        self.retention_days = retention_days

    def _publish(self, matches: list[ProcessedMatch], region: str) -> Optional[int]:
        """Save all four entity types for ``region``; returns the composition count."""
        data = process_match_data(matches, region, catalog=self.catalog)
        if data.is_empty:
            return None
        for entity_type in EntityType:
            save_entity_data(self.repository, data, region, entity_type)
        return len(data.compositions)

    @timed(logger, "refresh")
    async def execute(self) -> dict[str, Any]:
        logger.info("Starting data refresh job with parallel continent processing")
        self.repository.initialize()

        matches = await self.match_source.process_all_continents_in_parallel(self.matches_per_region)

        if len(matches) < self.min_matches:
            logger.warning("Insufficient total matches, skipping global stats processing")
            return {
                "success": True,
                "message": "Job completed, but insufficient matches for global stats",
                "matchCount": len(matches),
            }

        logger.info(f"Processing {len(matches)} matches for global data")
        global_comps = self._publish(matches, GLOBAL_REGION)
        if global_comps is None:
            logger.warning("No global compositions generated, skipping")
            return {
                "success": True,
                "message": "Job completed but no global compositions generated",
                "matchCount": len(matches),
            }
        logger.info(f"Processed {global_comps} global compositions")

        by_region: dict[str, list[ProcessedMatch]] = defaultdict(list)
        unassigned = 0
        for match in matches:
            if match.region:
                by_region[match.region].append(match)
            else:
                unassigned += 1
        if unassigned:
            logger.warning(f"{unassigned} matches without a region only count towards global stats")

        regions_processed = []
        for region, region_matches in by_region.items():
            logger.info(f"Processing {len(region_matches)} matches for {region}")
            comps = self._publish(region_matches, region)
            if comps is None:
                logger.warning(f"No compositions generated for {region}, skipping")
                continue
            regions_processed.append({
                "region": region,
                "compositions": comps,
                "matchCount": len(region_matches),
            })

        self.repository.cleanup_old_data(self.retention_days)
        logger.success(f"Data refresh completed: {len(matches)} total matches")
        return {
            "success": True,
            "matchCount": len(matches),
            "regionsProcessed": regions_processed,
        }


async def run_refresh(repository: Optional[IStatsRepository] = None) -> dict[str, Any]:
    """Build the production pipeline against the Riot API and run one refresh.

    Raises:
        RiotCredentialError: if no API key is configured.
    """
    repository = repository or SqliteStatsRepository(settings.DB_PATH)
    catalog = GameAssetCatalog.from_directory(settings.MAPPING_DIR)
    async with RiotAPIClient(settings.RIOT_API_KEY) as client:
        processor = RegionProcessor(client, repository)
        fetcher = ContinentFetcher(processor, repository)
        use_case = RefreshStatsUseCase(repository, fetcher, catalog=catalog)
        return await use_case.execute()

"""Parallel-across-continents, sequential-within-continent region fetching."""
from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from tft_stats.config import settings
from tft_stats.core.logging import get_logger, log_context
from tft_stats.domain.entities import ProcessedMatch
from tft_stats.domain.enums import Continent, Region, RegionStatus
from tft_stats.domain.interfaces import IStatsRepository
from .region_processor import RegionProcessor

logger = get_logger(__name__, service="pipeline")


def enabled_regions(continent: Continent, disabled: Iterable[str] = ()) -> list[Region]:
    """Regions of ``continent`` minus those disabled by key."""
    skip = {d.upper() for d in disabled}
    return [r for r in continent.regions if r.key not in skip]


class ContinentFetcher:
    """
    Runs one task per continent inside a TaskGroup.

    Regions of a continent share the continental match quotas, so each
    continent task walks its regions one at a time with a short pause in
    between. A failing region is marked ``error`` and skipped.
    """

    def __init__(
        self,
        processor: RegionProcessor,
        repository: IStatsRepository,
        region_delay: float = settings.REGION_DELAY,
        disabled_regions: Optional[Iterable[str]] = None,
    ):
        self.processor = processor
        self.repository = repository
        self.region_delay = region_delay
        self.disabled_regions = set(disabled_regions if disabled_regions is not None else settings.DISABLED_REGIONS)

    async def process_continent(self, regions: list[Region], matches_per_region: int) -> list[ProcessedMatch]:
        results: list[ProcessedMatch] = []
        for index, region in enumerate(regions):
            try:
                logger.info(f"Processing {region.key} in continent group")
                results.extend(await self.processor.process_region(region, matches_per_region))
            except Exception as exc:
                logger.error(f"Failed to process {region.key} in continent: {exc}")
                self.repository.update_region_status(
                    region.key,
                    RegionStatus.ERROR.value,
                    str(exc) or "Unknown error during continent processing",
                )
            if index < len(regions) - 1:
                await asyncio.sleep(self.region_delay)
        return results

    async def process_all_continents_in_parallel(
        self, matches_per_region: int = settings.MATCHES_PER_REGION
    ) -> list[ProcessedMatch]:
        logger.info(f"Starting parallel continent processing with {matches_per_region} matches per region")
        tasks: list[asyncio.Task] = []
        failed = False
        try:
            async with asyncio.TaskGroup() as group:
                for continent in Continent:
                    regions = enabled_regions(continent, self.disabled_regions)
                    if not regions:
                        continue
                    logger.info(
                        f"Setting up processor for {continent.value} with regions: {', '.join(r.key for r in regions)}"
                    )
                    with log_context(continent=continent.value):
                        tasks.append(group.create_task(self.process_continent(regions, matches_per_region)))
        except* Exception as eg:
            for exc in eg.exceptions:
                logger.error(f"Error in parallel continent processing: {exc!r}")
            failed = True
        if failed:
            return []

        all_matches = [m for task in tasks for m in task.result()]
        logger.success(f"Parallel processing complete: {len(all_matches)} total matches across all continents")
        return all_matches

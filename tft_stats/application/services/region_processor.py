"""Per-region fetch pipeline: league → summoners → match ids → match details."""
from __future__ import annotations

import asyncio
from typing import Any, Optional

from tft_stats.config import settings
from tft_stats.core.logging import get_logger, log_context, timed
from tft_stats.domain.entities import ProcessedMatch
from tft_stats.domain.enums import Region, RegionStatus
from tft_stats.domain.interfaces import IStatsRepository

logger = get_logger(__name__, service="pipeline")


class RegionDegraded(Exception):
    """A stage produced nothing usable; carries the status reason."""


def _successful(results: list[Any]) -> list[Any]:
    out = []
    for res in results:
        if isinstance(res, BaseException):
            logger.debug(f"Dropped failed request: {res!r}")
            continue
        if res:
            out.append(res)
    return out


class RegionProcessor:
    """Fetch and normalize recent high-elo matches for one region.

    Never raises: empty stages mark the region ``degraded`` and unexpected
    errors mark it ``error``; both return ``[]``.
    """

    def __init__(
        self,
        client,
        repository: IStatsRepository,
        top_players: int = settings.TOP_PLAYERS,
        batch_size: int = settings.MATCH_BATCH_SIZE,
        batch_delay: float = settings.MATCH_BATCH_DELAY,
    ):
        self.client = client
        self.repository = repository
        self.top_players = top_players
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay

    @timed(logger, "process_region")
    async def process_region(self, region: Region, matches_per_region: int = settings.MATCHES_PER_REGION) -> list[ProcessedMatch]:
        with log_context(region=region.key, continent=region.continent.value):
            logger.info(f"Processing region {region.key}...")
            self.repository.update_region_status(region.key, RegionStatus.PROCESSING.value)
            try:
                matches = await self._fetch_matches(region, matches_per_region)
            except RegionDegraded as reason:
                logger.warning(f"{region.key} degraded: {reason}")
                self.repository.update_region_status(region.key, RegionStatus.DEGRADED.value, str(reason))
                return []
            except Exception as exc:
                logger.exception(f"Error processing region {region.key}: {exc}")
                self.repository.update_region_status(region.key, RegionStatus.ERROR.value, str(exc) or type(exc).__name__)
                return []

            self.repository.update_region_status(region.key, RegionStatus.ACTIVE.value)
            logger.success(f"{region.key}: {len(matches)} matches")
            return matches

    async def _fetch_matches(self, region: Region, matches_per_region: int) -> list[ProcessedMatch]:
        league = await self.client.get_master_league(region)
        entries = (league or {}).get("entries") or []
        if not entries:
            raise RegionDegraded("No league data available")

        players = sorted(entries, key=lambda e: e.get("leaguePoints") or 0, reverse=True)[: self.top_players]
        if not players:
            raise RegionDegraded("No players found")

        summoners = _successful(await asyncio.gather(
            *(self._fetch_summoner(region, entry) for entry in players),
            return_exceptions=True,
        ))
        puuids = [s.get("puuid") for s in summoners if s.get("puuid")]
        if not puuids:
            raise RegionDegraded("No summoner data available")

        match_lists = _successful(await asyncio.gather(
            *(self.client.get_match_ids(region, puuid) for puuid in puuids),
            return_exceptions=True,
        ))
        match_ids = list(dict.fromkeys(mid for ids in match_lists for mid in ids))[:matches_per_region]
        if not match_ids:
            raise RegionDegraded("No matches found")

        logger.info(f"Fetching {len(match_ids)} matches for {region.key}...")
        return await self._fetch_details(region, match_ids)

    async def _fetch_summoner(self, region: Region, entry: dict) -> Optional[dict]:
        summoner_id = entry.get("summonerId")
        if summoner_id:
            return await self.client.get_summoner(region, summoner_id)
        puuid = entry.get("puuid")
        if puuid:
            return await self.client.get_summoner_by_puuid(region, puuid)
        return None

    async def _fetch_details(self, region: Region, match_ids: list[str]) -> list[ProcessedMatch]:
        matches: list[ProcessedMatch] = []
        for start in range(0, len(match_ids), self.batch_size):
            batch = match_ids[start:start + self.batch_size]
            results = _successful(await asyncio.gather(
                *(self.client.get_match(region, mid) for mid in batch),
                return_exceptions=True,
            ))
            for raw in results:
                match = self._normalize(raw, region)
                if match is not None:
                    self.repository.save_match(match.id, region.key, raw)
                    matches.append(match)
            if start + self.batch_size < len(match_ids):
                await asyncio.sleep(self.batch_delay)
        return matches

    @staticmethod
    def _normalize(raw: dict, region: Region) -> Optional[ProcessedMatch]:
        match_id = (raw.get("metadata") or {}).get("match_id") if isinstance(raw, dict) else None
        if not match_id:
            return None
        try:
            return ProcessedMatch.from_riot(raw, region.key)
        except Exception as exc:
            logger.warning(f"Skipping malformed match {match_id}: {exc!r}")
            return None

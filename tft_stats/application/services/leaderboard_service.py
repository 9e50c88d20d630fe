"""Apex ladder lookups: top players per region and the global #1."""
from __future__ import annotations

import asyncio
from typing import Any, Optional

from tft_stats.core.logging import get_logger
from tft_stats.domain.enums import Region
from tft_stats.infrastructure.api import LEAGUE_TIERS

logger = get_logger(__name__, service="leaderboard")

MAX_LEADERBOARD_SIZE = 50


class LeaderboardService:
    """Reads the highest populated apex tier and resolves summoner names in batches."""

    def __init__(self, client, name_batch_size: int = 5):
        self.client = client
        self.name_batch_size = max(1, name_batch_size)

    async def _apex_league(self, region: Region) -> tuple[str, list[dict]]:
        for tier in LEAGUE_TIERS:
            league = await self.client.get_league(region, tier)
            entries = (league or {}).get("entries") or []
            if entries:
                return tier.upper(), entries
            logger.debug(f"No {tier} entries for {region.key}")
        return "", []

    async def _summoner_name(self, region: Region, entry: dict) -> Optional[str]:
        if entry.get("summonerId"):
            summoner = await self.client.get_summoner(region, entry["summonerId"])
        elif entry.get("puuid"):
            summoner = await self.client.get_summoner_by_puuid(region, entry["puuid"])
        else:
            return None
        return (summoner or {}).get("name") or None

    async def _names(self, region: Region, entries: list[dict]) -> list[Optional[str]]:
        names: list[Optional[str]] = []
        for start in range(0, len(entries), self.name_batch_size):
            batch = entries[start:start + self.name_batch_size]
            results = await asyncio.gather(
                *(self._summoner_name(region, e) for e in batch),
                return_exceptions=True,
            )
            for res in results:
                if isinstance(res, BaseException):
                    logger.debug(f"Summoner lookup failed: {res!r}")
                    names.append(None)
                else:
                    names.append(res)
        return names

    async def top_players(self, region: Region, limit: int = MAX_LEADERBOARD_SIZE) -> list[dict[str, Any]]:
        """Top ``limit`` players by league points, ranked from 1."""
        limit = max(1, min(limit, MAX_LEADERBOARD_SIZE))
        tier, entries = await self._apex_league(region)
        if not entries:
            logger.warning(f"No leaderboard data found for {region.key}")
            return []

        top = sorted(entries, key=lambda e: e.get("leaguePoints") or 0, reverse=True)[:limit]
        names = await self._names(region, top)
        return [
            {
                "summonerId": entry.get("summonerId") or "",
                "puuid": entry.get("puuid") or "",
                "summonerName": name or entry.get("summonerName") or f"Player {rank}",
                "tagLine": "",
                "rank": rank,
                "leaguePoints": entry.get("leaguePoints") or 0,
                "wins": entry.get("wins") or 0,
                "losses": entry.get("losses") or 0,
                "tier": tier,
                "division": "",
                "region": region.key,
            }
            for rank, (entry, name) in enumerate(zip(top, names), start=1)
        ]

    async def global_leader(self) -> Optional[dict[str, Any]]:
        """Highest-LP challenger across every region, or None when no ladder answered."""
        best: Optional[tuple[Region, dict]] = None
        for region in Region:
            league = await self.client.get_league(region, "challenger")
            entries = (league or {}).get("entries") or []
            if not entries:
                continue
            top = max(entries, key=lambda e: e.get("leaguePoints") or 0)
            if best is None or (top.get("leaguePoints") or 0) > (best[1].get("leaguePoints") or 0):
                best = (region, top)

        if best is None:
            return None
        region, entry = best
        [name] = await self._names(region, [entry])
        return {
            "summonerId": entry.get("summonerId") or "",
            "puuid": entry.get("puuid") or "",
            "summonerName": name or entry.get("summonerName") or "Global #1",
            "leaguePoints": entry.get("leaguePoints") or 0,
            "region": region.key,
            "tier": "CHALLENGER",
        }

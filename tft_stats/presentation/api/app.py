"""HTTP API: scheduled refresh trigger and read endpoints over stored snapshots."""
from __future__ import annotations

import hmac
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tft_stats.application.services.leaderboard_service import LeaderboardService
from tft_stats.config import settings
from tft_stats.domain.enums import EntityType, Region
from tft_stats.domain.interfaces import IStatsRepository
from tft_stats.infrastructure.api import RiotAPIClient, RiotCredentialError
from tft_stats.infrastructure.repositories import SqliteStatsRepository

logger = logging.getLogger(__name__)

RefreshRunner = Callable[[IStatsRepository], Awaitable[dict[str, Any]]]
ClientFactory = Callable[[], RiotAPIClient]

STATS_CACHE = "public, s-maxage=3600, stale-while-revalidate=7200"
STATUS_CACHE = "public, s-maxage=60, stale-while-revalidate=120"
LEADERBOARD_CACHE = "s-maxage=120, stale-while-revalidate=240"
GLOBAL_LEADER_CACHE = "s-maxage=300, stale-while-revalidate=600"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _region_key(region: str) -> str:
    """Normalize a region query value to its stored key (``all``, ``EUW``...)."""
    if region.strip().lower() == "all":
        return "all"
    return Region.from_key(region).key


def _authorized(request: Request, secret: str) -> bool:
    if not secret:
        return False
    header = request.headers.get("authorization", "")
    return hmac.compare_digest(header, f"Bearer {secret}")


def _status_dict(row: dict[str, Any]) -> dict[str, Any]:
    updated = row.get("updated_at")
    return {
        "region": row.get("region"),
        "status": row.get("status"),
        "lastUpdated": datetime.fromtimestamp(updated, tz=timezone.utc).isoformat() if updated else None,
        "errorCount": row.get("error_count") or 0,
        "lastError": row.get("last_error"),
    }


async def _default_runner(repository: IStatsRepository) -> dict[str, Any]:
    from tft_stats.application.use_cases import run_refresh
    return await run_refresh(repository)


def _default_client() -> RiotAPIClient:
    return RiotAPIClient(settings.RIOT_API_KEY)


def _match_summary(comp: dict[str, Any], region: str) -> dict[str, Any]:
    return {"id": comp.get("id") or "unknown", "region": region, "participants": []}


def create_app(
    repository: Optional[IStatsRepository] = None,
    refresh_runner: Optional[RefreshRunner] = None,
    cron_secret: Optional[str] = None,
    client_factory: Optional[ClientFactory] = None,
) -> FastAPI:
    """Build the API around ``repository``.

    ``refresh_runner`` defaults to the production pipeline and
    ``client_factory`` to a Riot client using the configured key; tests
    pass stubs for both.
    """
    repo = repository or SqliteStatsRepository(settings.DB_PATH)
    repo.initialize()
    runner = refresh_runner or _default_runner
    secret = settings.CRON_SECRET if cron_secret is None else cron_secret
    new_client = client_factory or _default_client

    app = FastAPI(title="TFT Stats API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.api_route("/api/cron/refresh-data", methods=["GET", "POST"])
    async def refresh_data(request: Request):
        """Run one full refresh; protected by the cron bearer token."""
        if not _authorized(request, secret):
            logger.warning("Rejected unauthorized refresh request")
            return _error(401, "Unauthorized")
        try:
            result = await runner(repo)
        except Exception as exc:
            logger.exception(f"Refresh job failed: {exc}")
            return _error(500, str(exc) or exc.__class__.__name__)
        return JSONResponse(result)

    @app.get("/api/tft/entities/{entity_type}")
    async def get_entities(entity_type: str, region: str = Query("all")):
        try:
            kind = EntityType.parse(entity_type)
            region = _region_key(region)
        except ValueError as exc:
            return _error(400, str(exc))
        data = repo.get_stats(kind.value, region)
        if data is None:
            return _error(404, f"No {kind.value} data found for {region}")
        return JSONResponse(data, headers={"Cache-Control": STATS_CACHE})

    @app.get("/api/tft/compositions")
    async def get_compositions(region: str = Query("all")):
        try:
            region = _region_key(region)
        except ValueError as exc:
            return _error(400, str(exc))
        data = repo.get_stats(EntityType.COMPOSITIONS.value, region)
        if data is None:
            return _error(404, f"No composition data found for {region}")
        return JSONResponse({**data, "region": region}, headers={"Cache-Control": STATS_CACHE})

    @app.get("/api/tft/matches")
    async def get_matches(region: str = Query("all"), limit: int = Query(1000, ge=1, le=1000)):
        """Composition ids from the latest snapshot, else the raw stored matches."""
        try:
            region = _region_key(region)
        except ValueError as exc:
            return _error(400, str(exc))
        snapshot = repo.get_stats(EntityType.COMPOSITIONS.value, region)
        if snapshot and snapshot.get("compositions"):
            comps = snapshot["compositions"][:limit]
            return JSONResponse([_match_summary(c, region) for c in comps], headers={"Cache-Control": STATS_CACHE})
        matches = repo.get_matches(None if region == "all" else region, limit=limit)
        if matches:
            return JSONResponse(matches, headers={"Cache-Control": STATS_CACHE})
        return _error(404, f"No match data found for {region}")

    @app.get("/api/tft/leaderboard")
    async def leaderboard(region: str = Query("NA"), limit: int = Query(50)):
        try:
            target = Region.from_key(region)
        except ValueError as exc:
            return _error(400, str(exc))
        try:
            async with new_client() as client:
                players = await LeaderboardService(client).top_players(target, limit)
        except RiotCredentialError as exc:
            logger.error(f"Leaderboard unavailable: {exc}")
            return _error(500, str(exc))
        if not players:
            return _error(404, f"No leaderboard data found for {target.key}")
        return JSONResponse(players, headers={"Cache-Control": LEADERBOARD_CACHE})

    @app.get("/api/tft/leaderboard/global")
    async def global_leaderboard():
        try:
            async with new_client() as client:
                leader = await LeaderboardService(client).global_leader()
        except RiotCredentialError as exc:
            logger.error(f"Global leaderboard unavailable: {exc}")
            return _error(500, str(exc))
        if leader is None:
            return _error(404, "No global data found")
        return JSONResponse(leader, headers={"Cache-Control": GLOBAL_LEADER_CACHE})

    @app.get("/api/region-status")
    async def region_status():
        statuses = [_status_dict(row) for row in repo.get_region_statuses()]
        return JSONResponse(statuses, headers={"Cache-Control": STATUS_CACHE})

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return _error(500, "Internal server error")

    return app

"""Sliding-window rate limiters matching Riot's TFT endpoint quotas."""
import asyncio
import logging
import time
from collections import deque
from typing import Callable, Deque, Optional

import httpx

from tft_stats.config import settings
from tft_stats.domain.enums import Continent, Region

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window limiter: at most ``max_requests`` admissions within any
    ``window`` seconds. A timestamp counts against the window until it is
    ``window`` seconds old.

    Callers over capacity wait in FIFO order. They are released by a sweep
    task (every ``window / 2`` by default, alive only while someone waits)
    and by any later ``acquire`` that finds freed capacity. A new caller is
    never admitted ahead of queued ones.
    """

    def __init__(
        self,
        max_requests: int,
        window: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: Optional[float] = None,
        name: str = "",
    ):
        if max_requests <= 0 or window <= 0:
            raise ValueError("max_requests and window must be positive")
        self.max_requests = max_requests
        self.window = window
        self.name = name
        self._clock = clock
        self._sweep_interval = sweep_interval if sweep_interval is not None else window / 2

        self._timestamps: Deque[float] = deque()
        self._pending: Deque[asyncio.Future] = deque()
        self._sweep_task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window:
            self._timestamps.popleft()

    def _release_pending(self) -> int:
        """Admit queued callers in order while there is capacity."""
        now = self._clock()
        self._prune(now)
        released = 0
        while self._pending and len(self._timestamps) < self.max_requests:
            fut = self._pending.popleft()
            if fut.done():
                continue
            self._timestamps.append(now)
            fut.set_result(None)
            released += 1
        return released

    async def acquire(self) -> None:
        self._release_pending()
        if not self._pending and len(self._timestamps) < self.max_requests:
            self._timestamps.append(self._clock())
            return

        fut = asyncio.get_running_loop().create_future()
        self._pending.append(fut)
        logger.debug(f"Rate limit {self.name} full, {len(self._pending)} queued")
        self._ensure_sweeper()
        await fut

    def sweep(self) -> int:
        """Release whatever capacity has freed up; returns how many callers were admitted."""
        return self._release_pending()

    def _ensure_sweeper(self) -> None:
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def _sweep_loop(self) -> None:
        while self._pending:
            await asyncio.sleep(self._sweep_interval)
            self._release_pending()
        self._sweep_task = None

    def get_status(self) -> tuple[int, int, int]:
        """(used, limit, queued) for the current window."""
        self._prune(self._clock())
        return len(self._timestamps), self.max_requests, len(self._pending)

    async def close(self) -> None:
        task, self._sweep_task = self._sweep_task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


def endpoint_class(path: str) -> str:
    """Map a Riot TFT API path to its rate-limit class."""
    if "/tft/match/v1/matches/by-puuid" in path:
        return "matches-by-puuid"
    if "/tft/match/v1/matches/" in path:
        return "match"
    if "/tft/summoner/v1/" in path:
        return "summoner"
    if "/tft/league/v1/challenger" in path:
        return "league-challenger"
    if "/tft/league/v1/grandmaster" in path:
        return "league-grandmaster"
    if "/tft/league/v1/master" in path:
        return "league-master"
    if "/tft/league/v1/entries/by-summoner" in path:
        return "league-summoner"
    if "/tft/league/v1/entries" in path:
        return "league-entries"
    return "default"


class RateLimitRegistry:
    """Independent limiters per (continent, endpoint class) and (region, endpoint class).

    Riot enforces continental quotas on the match routing hosts and regional
    quotas on the platform hosts, so each URL maps to the limiter of the host
    it targets.
    """

    def __init__(
        self,
        continent_limits: Optional[dict[str, tuple[int, float]]] = None,
        region_limits: Optional[dict[str, tuple[int, float]]] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if continent_limits is None:
            continent_limits = settings.CONTINENT_RATE_LIMITS
        if region_limits is None:
            region_limits = settings.REGION_RATE_LIMITS

        self.continent_limiters: dict[Continent, dict[str, RateLimiter]] = {
            continent: {
                cls: RateLimiter(n, window, clock=clock, name=f"{continent.value}:{cls}")
                for cls, (n, window) in continent_limits.items()
            }
            for continent in Continent
        }
        self.region_limiters: dict[Region, dict[str, RateLimiter]] = {
            region: {
                cls: RateLimiter(n, window, clock=clock, name=f"{region.key}:{cls}")
                for cls, (n, window) in region_limits.items()
            }
            for region in Region
        }

    def limiters_for(self, url: str) -> list[RateLimiter]:
        parsed = httpx.URL(url)
        host, path = parsed.host, parsed.path
        cls = endpoint_class(path)

        if cls in ("match", "matches-by-puuid"):
            continent = Continent.from_host(host)
            if continent is None:
                region = Region.from_host(host) or Region.NA
                continent = region.continent
            limiter = self.continent_limiters[continent].get(cls)
            return [limiter] if limiter else []

        region = Region.from_host(host) or Region.NA
        limiters = self.region_limiters[region]
        limiter = limiters.get(cls) or limiters.get("default")
        return [limiter] if limiter else []

    async def acquire(self, url: str) -> None:
        for limiter in self.limiters_for(url):
            await limiter.acquire()

    def all_limiters(self) -> list[RateLimiter]:
        limiters = [l for group in self.continent_limiters.values() for l in group.values()]
        limiters.extend(l for group in self.region_limiters.values() for l in group.values())
        return limiters

    async def close(self) -> None:
        """Stop every sweep task."""
        for limiter in self.all_limiters():
            await limiter.close()

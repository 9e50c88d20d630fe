"""Riot Games TFT API client."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from tft_stats.config import settings
from tft_stats.domain.enums import Region
from .rate_limiter import RateLimitRegistry

logger = logging.getLogger(__name__)


class RiotCredentialError(RuntimeError):
    """API key missing, expired or not allowed to call the endpoint (401/403)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class FetchOptions:
    """Per-call retry settings."""

    timeout: float = settings.REQUEST_TIMEOUT
    max_retries: int = settings.MAX_RETRIES
    base_delay: float = settings.RETRY_BASE_DELAY

    def backoff(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)


# Per-endpoint options used by the region pipeline.
MASTER_LEAGUE_OPTIONS = FetchOptions(timeout=15.0, max_retries=3)
SUMMONER_OPTIONS = FetchOptions(timeout=8.0, max_retries=2)
MATCH_IDS_OPTIONS = FetchOptions(timeout=15.0, max_retries=2)
MATCH_DETAIL_OPTIONS = FetchOptions(timeout=8.0, max_retries=2)

_RETRYABLE_STATUSES = {429, 502, 504}

LEAGUE_TIERS = ("challenger", "grandmaster", "master")


class RiotAPIClient:
    """Asynchronous TFT API client with per-host rate limiting and retries."""

    def __init__(
        self,
        api_key: Optional[str],
        rate_limits: Optional[RateLimitRegistry] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.rate_limits = rate_limits if rate_limits is not None else RateLimitRegistry()
        self.session: Optional[httpx.AsyncClient] = None
        self.last_status_code: Optional[int] = None
        self._transport = transport

    async def __aenter__(self):
        if not self.api_key:
            raise RiotCredentialError("RIOT_API_KEY is not configured")
        self.session = httpx.AsyncClient(
            timeout=settings.REQUEST_TIMEOUT,
            headers={"X-Riot-Token": self.api_key},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_):
        if self.session:
            await self.session.aclose()
            self.session = None
        await self.rate_limits.close()

    @staticmethod
    def platform_url(region: Region) -> str:
        return f"https://{region.host}"

    @staticmethod
    def routing_url(region: Region) -> str:
        return f"https://{region.continent.host}"

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[float]:
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            return max(float(value), 0.0)
        except ValueError:
            return None

    async def fetch_with_retry(self, url: str, options: Optional[FetchOptions] = None) -> Optional[Any]:
        """GET ``url`` and return its decoded JSON body.

        Rate limits are acquired before every attempt. 429, 5xx, timeouts,
        network errors and non-JSON success bodies are retried with
        exponential backoff; 401/403 raise ``RiotCredentialError``; any
        other non-2xx status and exhausted retries return ``None``.
        """
        if not self.api_key:
            raise RiotCredentialError("RIOT_API_KEY is not configured")
        if self.session is None:
            raise RuntimeError("RiotAPIClient must be used as an async context manager")

        opts = options or FetchOptions()
        for attempt in range(opts.max_retries):
            last_attempt = attempt == opts.max_retries - 1
            try:
                await self.rate_limits.acquire(url)
                response = await self.session.get(url, timeout=opts.timeout)
                self.last_status_code = response.status_code

                if response.is_success:
                    try:
                        return response.json()
                    except ValueError as exc:
                        logger.warning(f"Unparseable body from {url} (attempt {attempt + 1}): {exc}")
                        if last_attempt:
                            break
                        await asyncio.sleep(opts.backoff(attempt))
                        continue

                if response.status_code in (401, 403):
                    logger.error(f"{response.status_code} from Riot API, check RIOT_API_KEY")
                    raise RiotCredentialError(
                        f"Riot API rejected the API key ({response.status_code})",
                        status_code=response.status_code,
                    )

                if response.status_code in _RETRYABLE_STATUSES or response.status_code >= 500:
                    if last_attempt:
                        break
                    wait = opts.backoff(attempt)
                    if response.status_code == 429:
                        retry_after = self._retry_after(response)
                        if retry_after is not None:
                            wait = retry_after
                        logger.warning(f"429 rate-limited on {url}, waiting {wait:.1f}s")
                    else:
                        logger.warning(f"HTTP {response.status_code} for {url}, retry {attempt + 1} in {wait:.1f}s")
                    await asyncio.sleep(wait)
                    continue

                logger.warning(f"HTTP {response.status_code} for {url}")
                return None

            except httpx.TimeoutException:
                logger.warning(f"Timeout after {opts.timeout}s for {url} (attempt {attempt + 1})")
                if last_attempt:
                    break
                await asyncio.sleep(opts.backoff(attempt))

            except httpx.TransportError as exc:
                logger.warning(f"Network error for {url}: {exc}")
                if last_attempt:
                    break
                await asyncio.sleep(opts.backoff(attempt))

        logger.error(f"Giving up on {url} after {opts.max_retries} attempts")
        return None

    # ── League API ─────────────────────────────────────────────────────

    async def get_league(self, region: Region, tier: str = "master") -> Optional[dict]:
        """Apex league list for ``tier`` (challenger, grandmaster or master)."""
        if tier not in LEAGUE_TIERS:
            raise ValueError(f"Unknown league tier: {tier!r}")
        url = f"{self.platform_url(region)}/tft/league/v1/{tier}"
        result = await self.fetch_with_retry(url, MASTER_LEAGUE_OPTIONS)
        return result if isinstance(result, dict) else None

    async def get_master_league(self, region: Region) -> Optional[dict]:
        return await self.get_league(region, "master")

    # ── Summoner API ───────────────────────────────────────────────────

    async def get_summoner(self, region: Region, summoner_id: str) -> Optional[dict]:
        url = f"{self.platform_url(region)}/tft/summoner/v1/summoners/{summoner_id}"
        return await self.fetch_with_retry(url, SUMMONER_OPTIONS)

    async def get_summoner_by_puuid(self, region: Region, puuid: str) -> Optional[dict]:
        url = f"{self.platform_url(region)}/tft/summoner/v1/summoners/by-puuid/{puuid}"
        return await self.fetch_with_retry(url, SUMMONER_OPTIONS)

    # ── Match API ──────────────────────────────────────────────────────

    async def get_match_ids(self, region: Region, puuid: str, count: int = 100) -> list[str]:
        url = f"{self.routing_url(region)}/tft/match/v1/matches/by-puuid/{puuid}/ids?count={min(count, 100)}"
        result = await self.fetch_with_retry(url, MATCH_IDS_OPTIONS)
        return result if isinstance(result, list) else []

    async def get_match(self, region: Region, match_id: str) -> Optional[dict]:
        url = f"{self.routing_url(region)}/tft/match/v1/matches/{match_id}"
        result = await self.fetch_with_retry(url, MATCH_DETAIL_OPTIONS)
        return result if isinstance(result, dict) else None

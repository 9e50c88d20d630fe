from __future__ import annotations

from typing import Any, Dict, Optional

from tft_stats.config import settings
from tft_stats.core.logging import get_logger
from tft_stats.domain.interfaces import IStatsRepository
from tft_stats.infrastructure.api import RiotCredentialError
from tft_stats.infrastructure.repositories import SqliteStatsRepository
from tft_stats.application.use_cases import run_refresh


class RefreshCommand:
    """Runs one full refresh and prints the per-region outcome."""

    def __init__(self, repository: Optional[IStatsRepository] = None) -> None:
        self._log = get_logger(__name__, service="refresh-cli")
        self.repository = repository or SqliteStatsRepository(settings.DB_PATH)

    def _print_banner(self) -> None:
        print("\n" + "=" * 57)
        print("TFT STATS REFRESH")
        print("=" * 57)
        print(f"Matches per region: {settings.MATCHES_PER_REGION}")
        print(f"Top players per region: {settings.TOP_PLAYERS}")
        if settings.DISABLED_REGIONS:
            print(f"Disabled regions: {', '.join(sorted(settings.DISABLED_REGIONS))}")
        print("=" * 57)
        print("\nStarting data collection...\n", flush=True)

    def _print_result(self, result: Dict[str, Any]) -> None:
        print(f"\nTotal matches: {result.get('matchCount', 0)}")
        if result.get("message"):
            print(result["message"])
        regions = result.get("regionsProcessed") or []
        if regions:
            print(f"\n{'Region':<8} {'Comps':>6} {'Matches':>8}")
            print("-" * 24)
            for row in regions:
                print(f"{row['region']:<8} {row['compositions']:>6} {row['matchCount']:>8}")

    async def run(self) -> int:
        settings.validate()
        settings.create_directories()
        self._print_banner()
        self._log.info("refresh-start")
        try:
            result = await run_refresh(self.repository)
        except RiotCredentialError as e:
            self._log.error(lambda: f"refresh-credentials {e}")
            print(f"API key rejected: {e}")
            return 1
        self._print_result(result)
        self._log.success(lambda: f"refresh-done matches={result.get('matchCount', 0)}")
        return 0

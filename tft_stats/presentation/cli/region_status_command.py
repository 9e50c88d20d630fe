from __future__ import annotations

from datetime import datetime
from typing import Optional

from tft_stats.config import settings
from tft_stats.core.logging import get_logger
from tft_stats.domain.interfaces import IStatsRepository
from tft_stats.infrastructure.repositories import SqliteStatsRepository


def _fmt_time(ts: Optional[float]) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S") if ts else "-"


class RegionStatusCommand:
    """Region health table and retention cleanup."""

    def __init__(self, repository: Optional[IStatsRepository] = None) -> None:
        self.log = get_logger(__name__, service="status-cli")
        self.repository = repository or SqliteStatsRepository(settings.DB_PATH)
        self.repository.initialize()

    def run(self) -> None:
        while True:
            print("\n=== Region Status ===", flush=True)
            print(f"Database: {settings.DB_PATH}", flush=True)
            print("1) Show region statuses", flush=True)
            print(f"2) Clean up data older than {settings.RETENTION_DAYS} days", flush=True)
            print("3) Back", flush=True)
            choice = input("Choose: ").strip()
            if choice == "1":
                self.print_statuses()
                input("Press Enter to return to status menu...")
            elif choice == "2":
                self.cleanup()
            elif choice == "3":
                return
            else:
                print("Invalid option.", flush=True)

    def print_statuses(self) -> None:
        rows = self.repository.get_region_statuses()
        if not rows:
            print("No region status recorded yet.", flush=True)
            return
        print(f"\n{'Region':<8} {'Status':<11} {'Errors':>6}  {'Updated':<19}  Last error", flush=True)
        print("-" * 72, flush=True)
        for r in rows:
            print(
                f"{r['region']:<8} {r['status']:<11} {r.get('error_count') or 0:>6}  "
                f"{_fmt_time(r.get('updated_at')):<19}  {r.get('last_error') or ''}",
                flush=True,
            )

    def cleanup(self) -> None:
        confirm = input(f"Type 'YES' to delete data older than {settings.RETENTION_DAYS} days: ").strip()
        if confirm != "YES":
            print("Not confirmed.")
            return
        self.repository.cleanup_old_data(settings.RETENTION_DAYS)
        self.log.success(lambda: f"cleanup-ok retention={settings.RETENTION_DAYS}")
        print("Cleanup complete.")

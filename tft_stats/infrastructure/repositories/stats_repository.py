"""SQLite-backed stats repository."""
import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

from tft_stats.domain.enums import RegionStatus
from tft_stats.domain.interfaces import IStatsRepository

logger = logging.getLogger(__name__)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS matches (id INTEGER PRIMARY KEY AUTOINCREMENT, match_id TEXT UNIQUE NOT NULL, region TEXT NOT NULL, data TEXT NOT NULL, created_at REAL NOT NULL)",
    "CREATE TABLE IF NOT EXISTS stats (id INTEGER PRIMARY KEY AUTOINCREMENT, type TEXT NOT NULL, region TEXT NOT NULL, data TEXT NOT NULL, version TEXT NOT NULL DEFAULT '1.0', created_at REAL NOT NULL)",
    "CREATE TABLE IF NOT EXISTS region_status (region TEXT PRIMARY KEY, status TEXT NOT NULL DEFAULT 'active', updated_at REAL, error_count INTEGER DEFAULT 0, last_error TEXT)",
    "CREATE INDEX IF NOT EXISTS idx_matches_region ON matches(region)",
    "CREATE INDEX IF NOT EXISTS idx_matches_created_at ON matches(created_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_stats_type_region ON stats(type, region, created_at DESC)",
)


class StatsRepositoryError(RuntimeError):
    """Schema could not be created."""


class SqliteStatsRepository(IStatsRepository):
    """Raw matches, stats snapshots and region health in one SQLite file.

    Snapshots are append-only: ``get_stats`` reads the newest row for a key
    and ``cleanup_old_data`` prunes older ones. Payloads are stored as JSON
    text.
    """

    def __init__(self, db_path: Path | str, clock: Callable[[], float] = time.time):
        self.db_path = Path(db_path) if str(db_path) != ":memory:" else db_path
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._initialized = False

    def initialize(self) -> None:
        if self._initialized:
            return
        try:
            with self._lock:
                cur = self._conn.cursor()
                for statement in _SCHEMA:
                    cur.execute(statement)
                self._conn.commit()
        except sqlite3.Error as exc:
            logger.error(f"Failed to initialize database schema: {exc}")
            raise StatsRepositoryError(str(exc)) from exc
        self._initialized = True
        logger.info(f"Database ready at {self.db_path}")

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ── Matches ────────────────────────────────────────────────────────

    def save_match(self, match_id: str, region: str, data: dict[str, Any]) -> bool:
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT OR IGNORE INTO matches(match_id, region, data, created_at) VALUES(?, ?, ?, ?)",
                    (match_id, region, json.dumps(data), self._clock()),
                )
                self._conn.commit()
            return True
        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.error(f"Failed to save match {match_id}: {exc}")
            return False

    def get_matches(self, region: Optional[str] = None, limit: int = 1000) -> list[dict[str, Any]]:
        try:
            with self._lock:
                if region and region != "all":
                    rows = self._conn.execute(
                        "SELECT data FROM matches WHERE region = ? ORDER BY created_at DESC, id DESC LIMIT ?",
                        (region, limit),
                    ).fetchall()
                else:
                    rows = self._conn.execute(
                        "SELECT data FROM matches ORDER BY created_at DESC, id DESC LIMIT ?",
                        (limit,),
                    ).fetchall()
            return [json.loads(r["data"]) for r in rows]
        except (sqlite3.Error, ValueError) as exc:
            logger.error(f"Failed to get matches: {exc}")
            return []

    # ── Stats snapshots ────────────────────────────────────────────────

    def save_stats(self, entity_type: str, region: str, payload: dict[str, Any]) -> bool:
        try:
            encoded = json.dumps(payload, allow_nan=False)
            entities = payload.get(entity_type) if isinstance(payload, dict) else None
            logger.info(
                f"Saving {entity_type} data for {region}: "
                f"{len(entities) if isinstance(entities, list) else 0} entities, {round(len(encoded) / 1024)}KB"
            )
            with self._lock:
                self._conn.execute(
                    "INSERT INTO stats(type, region, data, created_at) VALUES(?, ?, ?, ?)",
                    (entity_type, region, encoded, self._clock()),
                )
                self._conn.commit()
            return True
        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.error(f"Failed to save stats {entity_type}/{region}: {exc}")
            return False

    def get_stats(self, entity_type: str, region: str = "all") -> Optional[dict[str, Any]]:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT data FROM stats WHERE type = ? AND region = ? ORDER BY created_at DESC, id DESC LIMIT 1",
                    (entity_type, region),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.error(f"Failed to get stats {entity_type}/{region}: {exc}")
            return None
        if row is None:
            logger.info(f"No stats found for {entity_type}/{region}")
            return None
        try:
            return json.loads(row["data"])
        except ValueError as exc:
            logger.error(f"Corrupt stats row for {entity_type}/{region}: {exc}")
            return None

    # ── Region status ──────────────────────────────────────────────────

    def update_region_status(self, region: str, status: str, reason: Optional[str] = None) -> None:
        status = status.value if isinstance(status, RegionStatus) else str(status)
        now = self._clock()
        try:
            with self._lock:
                if status == RegionStatus.ERROR.value:
                    self._conn.execute(
                        "INSERT INTO region_status(region, status, updated_at, error_count, last_error) VALUES(?, ?, ?, 1, ?) "
                        "ON CONFLICT(region) DO UPDATE SET status = excluded.status, updated_at = excluded.updated_at, "
                        "error_count = region_status.error_count + 1, last_error = excluded.last_error",
                        (region, status, now, reason),
                    )
                else:
                    self._conn.execute(
                        "INSERT INTO region_status(region, status, updated_at, last_error) VALUES(?, ?, ?, ?) "
                        "ON CONFLICT(region) DO UPDATE SET status = excluded.status, updated_at = excluded.updated_at, "
                        "last_error = COALESCE(excluded.last_error, region_status.last_error)",
                        (region, status, now, reason),
                    )
                self._conn.commit()
        except sqlite3.Error as exc:
            logger.error(f"Failed to update region status {region}: {exc}")

    def get_region_statuses(self) -> list[dict[str, Any]]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT region, status, updated_at, error_count, last_error FROM region_status ORDER BY region"
                ).fetchall()
            return [dict(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error(f"Failed to get region statuses: {exc}")
            return []

    # ── Retention ──────────────────────────────────────────────────────

    def cleanup_old_data(self, retention_days: int = 7) -> None:
        cutoff = self._clock() - retention_days * 86400
        try:
            with self._lock:
                deleted_matches = self._conn.execute(
                    "DELETE FROM matches WHERE created_at < ?", (cutoff,)
                ).rowcount
                deleted_stats = self._conn.execute(
                    "DELETE FROM stats WHERE id NOT IN ("
                    " SELECT id FROM ("
                    "  SELECT id, ROW_NUMBER() OVER (PARTITION BY type, region ORDER BY created_at DESC, id DESC) AS row_num"
                    "  FROM stats"
                    " ) WHERE row_num <= 2"
                    ")"
                ).rowcount
                self._conn.commit()
            logger.info(f"Cleanup removed {deleted_matches} matches and {deleted_stats} stale snapshots")
        except sqlite3.Error as exc:
            logger.error(f"Failed to clean up old data: {exc}")

"""Repository interfaces for stats storage."""
from abc import ABC, abstractmethod
from typing import Any, Optional


class IStatsRepository(ABC):
    """Storage for raw matches, stats snapshots and region health.

    Implementations report storage failures through their return values
    (``False`` / ``None`` / ``[]``) instead of raising, so a broken store
    never aborts a refresh halfway through.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Create the schema if needed."""

    @abstractmethod
    def save_match(self, match_id: str, region: str, data: dict[str, Any]) -> bool:
        """Store a raw match payload (insert or replace)."""

    @abstractmethod
    def get_matches(self, region: Optional[str] = None, limit: int = 1000) -> list[dict[str, Any]]:
        """Raw match payloads, newest first, optionally for one region."""

    @abstractmethod
    def save_stats(self, entity_type: str, region: str, payload: dict[str, Any]) -> bool:
        """Append a new snapshot for ``(entity_type, region)``."""

    @abstractmethod
    def get_stats(self, entity_type: str, region: str) -> Optional[dict[str, Any]]:
        """Newest snapshot for ``(entity_type, region)``, or None."""

    @abstractmethod
    def update_region_status(self, region: str, status: str, reason: Optional[str] = None) -> None:
        """Record a region's status; error statuses also bump its error count."""

    @abstractmethod
    def get_region_statuses(self) -> list[dict[str, Any]]:
        """All known region statuses."""

    @abstractmethod
    def cleanup_old_data(self, retention_days: int = 7) -> None:
        """Drop matches past retention and all but the two newest snapshots per key."""

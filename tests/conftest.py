from __future__ import annotations

from typing import Any, Optional

import pytest

from tft_stats.domain.entities import Composition, CompositionItem, CompositionTrait, CompositionUnit
from tft_stats.domain.interfaces import IStatsRepository


class FakeRepository(IStatsRepository):
    """In-memory repository recording every call."""

    def __init__(self) -> None:
        self.initialized = False
        self.matches: dict[str, tuple[str, dict]] = {}
        self.stats: list[tuple[str, str, dict]] = []
        self.statuses: dict[str, dict[str, Any]] = {}
        self.status_history: list[tuple[str, str, Optional[str]]] = []
        self.cleanups: list[int] = []

    def initialize(self) -> None:
        self.initialized = True

    def save_match(self, match_id: str, region: str, data: dict) -> bool:
        self.matches.setdefault(match_id, (region, data))
        return True

    def get_matches(self, region: Optional[str] = None, limit: int = 1000) -> list[dict]:
        return [d for r, d in self.matches.values() if region in (None, "all", r)][:limit]

    def save_stats(self, entity_type: str, region: str, payload: dict) -> bool:
        self.stats.append((entity_type, region, payload))
        return True

    def get_stats(self, entity_type: str, region: str = "all") -> Optional[dict]:
        for t, r, payload in reversed(self.stats):
            if (t, r) == (entity_type, region):
                return payload
        return None

    def update_region_status(self, region: str, status: str, reason: Optional[str] = None) -> None:
        self.status_history.append((region, status, reason))
        entry = self.statuses.setdefault(region, {"region": region, "error_count": 0})
        entry["status"] = status
        entry["last_error"] = reason
        if status == "error":
            entry["error_count"] += 1

    def get_region_statuses(self) -> list[dict]:
        return list(self.statuses.values())

    def cleanup_old_data(self, retention_days: int = 7) -> None:
        self.cleanups.append(retention_days)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


def make_unit(unit_id: str, items: tuple[str, ...] = (), cost: int = 1) -> CompositionUnit:
    return CompositionUnit(
        id=unit_id,
        name=unit_id.replace("_", " "),
        cost=cost,
        items=[CompositionItem(id=i, name=i) for i in items],
    )


def make_comp(
    comp_id: str,
    count: Optional[int] = 1,
    avg_placement: float = 4.0,
    win_rate: float = 0.0,
    top4_rate: float = 50.0,
    units: tuple[CompositionUnit, ...] = (),
    traits: tuple[CompositionTrait, ...] = (),
) -> Composition:
    return Composition(
        id=comp_id,
        name=comp_id.title(),
        count=count,
        avg_placement=avg_placement,
        win_rate=win_rate,
        top4_rate=top4_rate,
        units=list(units),
        traits=list(traits),
    )


SNIPER_REBEL_TRAITS = [
    {"name": "Set13_Sniper", "num_units": 4, "style": 2},
    {"name": "Set13_Rebel", "num_units": 3, "style": 2},
    {"name": "Set13_Solo", "num_units": 1, "style": 1},
    {"name": "Set13_Inactive", "num_units": 1, "style": 0},
]


def riot_participant(placement: int, traits: Optional[list[dict]] = None, n_units: int = 6) -> dict:
    return {
        "placement": placement,
        "level": 8,
        "augments": ["TFT_Augment_Example"],
        "traits": SNIPER_REBEL_TRAITS if traits is None else traits,
        "units": [
            {
                "character_id": f"TFT13_Unit{i}",
                "tier": 2,
                "itemNames": ["TFT_Item_InfinityEdge"] if i == 0 else [],
            }
            for i in range(n_units)
        ],
    }


def riot_match(match_id: str, placements: tuple[int, ...] = (1, 5), traits: Optional[list[dict]] = None) -> dict:
    return {
        "metadata": {"match_id": match_id},
        "info": {"participants": [riot_participant(p, traits) for p in placements]},
    }

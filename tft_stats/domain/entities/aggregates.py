"""Per-unit, per-trait and per-item aggregates folded from compositions.

Every aggregate accumulates ``metric * weight`` sums and the total weight;
averages are derived from those sums only when read, so folding order never
changes the result.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from .composition import Composition, TrimmedComposition


@dataclass
class WeightedStats:
    """Running weighted sums for placement, win rate and top-4 rate."""

    count: float = 0
    placement_sum: float = 0.0
    win_rate_sum: float = 0.0
    top4_rate_sum: float = 0.0

    def add(self, composition: Composition, weight: Optional[float] = None) -> None:
        w = composition.weight if weight is None else weight
        self.count += w
        self.placement_sum += (composition.avg_placement or 0.0) * w
        self.win_rate_sum += (composition.win_rate or 0.0) * w
        self.top4_rate_sum += (composition.top4_rate or 0.0) * w

    def _mean(self, total: float) -> float:
        return total / self.count if self.count > 0 else 0.0

    @property
    def avg_placement(self) -> float:
        return self._mean(self.placement_sum)

    @property
    def win_rate(self) -> float:
        return self._mean(self.win_rate_sum)

    @property
    def top4_rate(self) -> float:
        return self._mean(self.top4_rate_sum)

    def to_dict(self) -> dict:
        return {
            'count': self.count,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
        }


@dataclass
class _RelatedComps:
    """Insertion-ordered, de-duplicated trimmed composition references."""

    by_id: dict[str, TrimmedComposition] = field(default_factory=dict)

    def add(self, composition: Composition) -> None:
        if composition.id not in self.by_id:
            self.by_id[composition.id] = composition.trimmed()

    def to_list(self) -> list[dict]:
        return [c.to_dict() for c in self.by_id.values()]

    def __len__(self) -> int:
        return len(self.by_id)


@dataclass
class _Aggregate:
    id: str
    name: str
    icon: str = ''
    stats: WeightedStats = field(default_factory=WeightedStats)
    related: _RelatedComps = field(default_factory=_RelatedComps)
    play_rate: float = 0.0

    def fold(self, composition: Composition) -> None:
        self.stats.add(composition)
        self.related.add(composition)

    @property
    def count(self) -> float:
        return self.stats.count

    @property
    def avg_placement(self) -> float:
        return self.stats.avg_placement

    @property
    def win_rate(self) -> float:
        return self.stats.win_rate

    @property
    def top4_rate(self) -> float:
        return self.stats.top4_rate

    def _base_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'count': self.count,
            'totalGames': self.count,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
            'playRate': self.play_rate,
            'stats': self.stats.to_dict(),
            'relatedComps': self.related.to_list(),
        }


@dataclass
class UnitAggregate(_Aggregate):
    cost: int = 0
    traits: dict[str, Any] = field(default_factory=dict)
    best_items: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({'cost': self.cost, 'traits': dict(self.traits), 'bestItems': list(self.best_items)})
        return data


@dataclass
class TraitAggregate(_Aggregate):
    """Aggregate for one trait at one tier."""

    tier: int = 0
    num_units: int = 0
    tier_icon: str = ''

    @property
    def key(self) -> tuple[str, int]:
        return (self.id, self.tier)

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({'tier': self.tier, 'numUnits': self.num_units, 'tierIcon': self.tier_icon})
        return data


@dataclass
class UnitWithItem(_Aggregate):
    """Stats of one unit restricted to boards where it carried a given item."""

    cost: int = 0

    def to_dict(self) -> dict:
        data = self._base_dict()
        data['cost'] = self.cost
        del data['playRate']
        return data


@dataclass
class ItemCombo:
    """Items seen together on the same unit as ``main_item_id``."""

    main_item_id: str
    item_ids: tuple[str, ...]
    appearances: int = 0
    weight: float = 0
    win_rate_sum: float = 0.0
    frequency: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.win_rate_sum / self.weight if self.weight > 0 else 0.0

    def to_dict(self, names: dict[str, dict]) -> dict:
        return {
            'mainItem': names.get(self.main_item_id, {'id': self.main_item_id}),
            'items': [names.get(i, {'id': i}) for i in (self.main_item_id, *self.item_ids)],
            'winRate': self.win_rate,
            'frequency': self.frequency,
        }


@dataclass
class ItemAggregate(_Aggregate):
    category: Optional[str] = None
    units: dict[str, UnitWithItem] = field(default_factory=dict)
    combos: list[ItemCombo] = field(default_factory=list)

    @property
    def units_with_item(self) -> list[UnitWithItem]:
        """Per-unit breakdown, best win rate first."""
        return sorted(self.units.values(), key=lambda u: u.win_rate, reverse=True)

    def to_dict(self, item_refs: Optional[dict[str, dict]] = None) -> dict:
        data = self._base_dict()
        data['category'] = self.category
        data['unitsWithItem'] = [u.to_dict() for u in self.units_with_item]
        data['combos'] = [c.to_dict(item_refs or {}) for c in self.combos]
        return data

    def ref(self) -> dict:
        """Small id/name/icon reference used inside combos."""
        return {'id': self.id, 'name': self.name, 'icon': self.icon}

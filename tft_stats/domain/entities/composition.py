"""Composition entities produced from grouped boards."""
from dataclasses import dataclass, field
from typing import Any, Optional


def _require_identity(kind: str, id: str, name: str) -> None:
    if not id or not str(id).strip():
        raise ValueError(f"{kind} requires a non-empty id")
    if not name or not str(name).strip():
        raise ValueError(f"{kind} {id!r} requires a non-empty name")


@dataclass
class CompositionItem:
    """An item carried by a composition unit."""

    id: str
    name: str
    icon: str = ''
    category: Optional[str] = None

    def __post_init__(self) -> None:
        _require_identity('CompositionItem', self.id, self.name)

    def to_dict(self) -> dict:
        data = {'id': self.id, 'name': self.name, 'icon': self.icon}
        if self.category is not None:
            data['category'] = self.category
        return data


@dataclass
class CompositionTrait:
    """An active trait of a composition at a given tier."""

    id: str
    name: str
    icon: str = ''
    tier: int = 0
    num_units: int = 0
    tier_icon: str = ''

    def __post_init__(self) -> None:
        _require_identity('CompositionTrait', self.id, self.name)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'tier': self.tier,
            'numUnits': self.num_units,
            'tierIcon': self.tier_icon,
        }


@dataclass
class CompositionUnit:
    """A unit of a composition.

    ``count`` is the number of boards in the group fielding the unit; it is
    ``None`` on a single board.
    """

    id: str
    name: str
    icon: str = ''
    cost: int = 0
    count: Optional[int] = None
    items: list[CompositionItem] = field(default_factory=list)
    traits: dict[str, Any] = field(default_factory=dict)
    best_items: list[dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        _require_identity('CompositionUnit', self.id, self.name)

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'cost': self.cost,
            'items': [i.to_dict() for i in self.items],
            'traits': dict(self.traits),
            'bestItems': list(self.best_items),
        }
        if self.count is not None:
            data['count'] = self.count
        return data


@dataclass
class Composition:
    """A team-build signature with its summary statistics.

    Rates are percentages (0-100). ``count`` may be missing on compositions
    that did not come from grouping; aggregation then weights them as 1.
    """

    id: str
    name: str
    icon: str = ''
    count: Optional[int] = None
    avg_placement: float = 0.0
    win_rate: float = 0.0
    top4_rate: float = 0.0
    play_rate: float = 0.0
    traits: list[CompositionTrait] = field(default_factory=list)
    units: list[CompositionUnit] = field(default_factory=list)
    placement_data: dict[int, int] = field(default_factory=dict)
    regions: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _require_identity('Composition', self.id, self.name)

    @property
    def weight(self) -> int:
        """Weight used by every aggregate fold: ``count``, or 1 when absent or non-positive."""
        if self.count is None or self.count <= 0:
            return 1
        return self.count

    def stats_dict(self) -> dict:
        return {
            'count': self.count or 0,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
        }

    def trimmed(self) -> 'TrimmedComposition':
        """Summary copy without nested units and traits."""
        return TrimmedComposition(
            id=self.id,
            name=self.name,
            icon=self.icon,
            count=self.count,
            avg_placement=self.avg_placement,
            win_rate=self.win_rate,
            top4_rate=self.top4_rate,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'count': self.count,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
            'playRate': self.play_rate,
            'traits': [t.to_dict() for t in self.traits],
            'units': [u.to_dict() for u in self.units],
            'placementData': [
                {'placement': placement, 'count': count}
                for placement, count in sorted(self.placement_data.items())
            ],
            'regions': dict(self.regions),
            'stats': self.stats_dict(),
        }


@dataclass(frozen=True)
class TrimmedComposition:
    """Back-reference to a composition kept on units, traits and items."""

    id: str
    name: str
    icon: str = ''
    count: Optional[int] = None
    avg_placement: float = 0.0
    win_rate: float = 0.0
    top4_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'count': self.count,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
            'stats': {
                'count': self.count or 0,
                'avgPlacement': self.avg_placement,
                'winRate': self.win_rate,
                'top4Rate': self.top4_rate,
            },
            'traits': [],
            'units': [],
        }


@dataclass
class ProcessedData:
    """Compositions built for one region (or ``all``) plus their summary."""

    compositions: list[Composition] = field(default_factory=list)
    total_games: int = 0
    avg_placement: float = 0.0
    region: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.compositions

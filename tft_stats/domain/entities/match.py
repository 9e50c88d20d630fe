"""Normalized TFT match entities."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(slots=True)
class MatchUnit:
    """A unit on a player's final board."""

    name: str  # character id, e.g. TFT13_Jinx
    tier: int = 1  # star level
    item_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'name': self.name, 'tier': self.tier, 'itemNames': list(self.item_names)}


@dataclass(slots=True)
class MatchTrait:
    """An active trait; ``tier_current`` holds the trait style (1-4)."""

    name: str
    tier_current: int
    num_units: int

    def to_dict(self) -> dict:
        return {'name': self.name, 'tier_current': self.tier_current, 'num_units': self.num_units}


@dataclass(slots=True)
class ProcessedParticipant:
    """One player's result in a match."""

    placement: int
    level: int = 0
    augments: list[str] = field(default_factory=list)
    units: list[MatchUnit] = field(default_factory=list)
    traits: list[MatchTrait] = field(default_factory=list)

    @classmethod
    def from_riot(cls, data: dict[str, Any]) -> 'ProcessedParticipant':
        """Build from a participant of the Riot match-v1 payload.

        Traits with style 0 (inactive) are dropped.
        """
        units = [
            MatchUnit(
                name=u.get('character_id', ''),
                tier=int(u.get('tier') or 1),
                item_names=list(u.get('itemNames') or []),
            )
            for u in data.get('units') or []
            if u.get('character_id')
        ]
        traits = [
            MatchTrait(
                name=t.get('name', ''),
                tier_current=int(t.get('style') or 0),
                num_units=int(t.get('num_units') or 0),
            )
            for t in data.get('traits') or []
            if (t.get('style') or 0) > 0 and t.get('name')
        ]
        return cls(
            placement=int(data.get('placement') or 0),
            level=int(data.get('level') or 0),
            augments=list(data.get('augments') or []),
            units=units,
            traits=traits,
        )

    def to_dict(self) -> dict:
        return {
            'placement': self.placement,
            'level': self.level,
            'augments': list(self.augments),
            'units': [u.to_dict() for u in self.units],
            'traits': [t.to_dict() for t in self.traits],
        }


@dataclass(slots=True)
class ProcessedMatch:
    """A completed match flattened to what the aggregation needs."""

    id: str
    region: Optional[str] = None  # region key, e.g. EUW
    participants: list[ProcessedParticipant] = field(default_factory=list)

    @classmethod
    def from_riot(cls, data: dict[str, Any], region: Optional[str] = None) -> 'ProcessedMatch':
        metadata = data.get('metadata') or {}
        info = data.get('info') or {}
        return cls(
            id=metadata.get('match_id', ''),
            region=region,
            participants=[ProcessedParticipant.from_riot(p) for p in info.get('participants') or []],
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'region': self.region,
            'participants': [p.to_dict() for p in self.participants],
        }

"""Domain entities."""
from .match import MatchTrait, MatchUnit, ProcessedMatch, ProcessedParticipant
from .composition import (
    Composition,
    CompositionItem,
    CompositionTrait,
    CompositionUnit,
    ProcessedData,
    TrimmedComposition,
)
from .aggregates import (
    ItemAggregate,
    ItemCombo,
    TraitAggregate,
    UnitAggregate,
    UnitWithItem,
    WeightedStats,
)

__all__ = [
    'MatchTrait',
    'MatchUnit',
    'ProcessedMatch',
    'ProcessedParticipant',
    'Composition',
    'CompositionItem',
    'CompositionTrait',
    'CompositionUnit',
    'ProcessedData',
    'TrimmedComposition',
    'ItemAggregate',
    'ItemCombo',
    'TraitAggregate',
    'UnitAggregate',
    'UnitWithItem',
    'WeightedStats',
]

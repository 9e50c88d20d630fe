"""Domain layer - Business entities, enums, and interfaces."""
from .entities import (
    Composition,
    CompositionItem,
    CompositionTrait,
    CompositionUnit,
    ItemAggregate,
    ProcessedData,
    ProcessedMatch,
    ProcessedParticipant,
    TraitAggregate,
    UnitAggregate,
)
from .enums import Continent, EntityType, Region, RegionStatus
from .interfaces import IStatsRepository

__all__ = [
    # Entities
    'Composition',
    'CompositionItem',
    'CompositionTrait',
    'CompositionUnit',
    'ItemAggregate',
    'ProcessedData',
    'ProcessedMatch',
    'ProcessedParticipant',
    'TraitAggregate',
    'UnitAggregate',
    # Enums
    'Continent',
    'EntityType',
    'Region',
    'RegionStatus',
    # Interfaces
    'IStatsRepository',
]

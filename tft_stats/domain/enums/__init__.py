"""Domain enumerations."""
from .region import Continent, Region
from .status import EntityType, RegionStatus

__all__ = [
    'Continent',
    'Region',
    'RegionStatus',
    'EntityType',
]

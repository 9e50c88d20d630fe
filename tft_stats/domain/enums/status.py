"""Region processing status and persisted entity types."""
from enum import Enum


class RegionStatus(Enum):
    """Health of a region after its last refresh attempt."""

    ACTIVE = "active"
    PROCESSING = "processing"
    DEGRADED = "degraded"  # no usable data, but nothing failed
    ERROR = "error"


class EntityType(Enum):
    """Kinds of snapshots stored per region."""

    COMPOSITIONS = "compositions"
    UNITS = "units"
    TRAITS = "traits"
    ITEMS = "items"

    @property
    def summary_key(self) -> str:
        """Summary field holding the top entities, e.g. ``topUnits``."""
        if self is EntityType.COMPOSITIONS:
            return "topComps"
        return "top" + self.value.capitalize()

    @classmethod
    def parse(cls, value: str) -> 'EntityType':
        """Parse an entity type name.

        Raises:
            ValueError: for anything outside compositions/units/traits/items.
        """
        try:
            return cls((value or '').strip().lower())
        except ValueError:
            raise ValueError(f"Invalid entity type: {value!r}") from None

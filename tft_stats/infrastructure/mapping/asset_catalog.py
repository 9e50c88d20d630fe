"""Static game asset catalog (display names, icons, unit costs)."""
import json
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

ASSET_PATHS = {
    'trait': '/assets/traits/',
    'unit': '/assets/units/',
    'item': '/assets/items/',
}
DEFAULT_ICON = '/assets/app/default.png'
TIER_NAMES = ('bronze', 'silver', 'gold', 'diamond')


def icon_path(icon: Optional[str], kind: str) -> str:
    """Resolve a mapping icon to a served path; absolute paths pass through."""
    if not icon:
        return DEFAULT_ICON
    if icon.startswith('/'):
        return icon
    kind = kind[:-1] if kind.endswith('s') else kind
    return f"{ASSET_PATHS.get(kind, '/assets/')}{icon}"


class GameAssetCatalog:
    """Lookup of trait, unit and item metadata keyed by Riot asset id.

    Reads ``traits.json`` (``origins`` + ``classes``), ``units.json``
    (``units``) and ``items.json`` (``items``) from the mapping directory.
    Missing files leave that section empty; unknown ids fall back to the id
    itself as the display name and to the default icon.
    """

    def __init__(
        self,
        traits: Optional[dict[str, dict]] = None,
        units: Optional[dict[str, dict]] = None,
        items: Optional[dict[str, dict]] = None,
    ):
        self.traits = traits or {}
        self.units = units or {}
        self.items = items or {}

    @classmethod
    def from_directory(cls, mapping_dir: Path) -> 'GameAssetCatalog':
        traits_doc = _load_json(mapping_dir / 'traits.json')
        traits = {**(traits_doc.get('origins') or {}), **(traits_doc.get('classes') or {})}
        units = _load_json(mapping_dir / 'units.json').get('units') or {}
        items = _load_json(mapping_dir / 'items.json').get('items') or {}
        logger.info(f"Loaded catalog: {len(traits)} traits, {len(units)} units, {len(items)} items")
        return cls(traits=traits, units=units, items=items)

    def _section(self, kind: str) -> dict[str, dict]:
        return {'trait': self.traits, 'unit': self.units, 'item': self.items}[kind]

    def display_name(self, asset_id: str, kind: str) -> str:
        entry = self._section(kind).get(asset_id) or {}
        return entry.get('name') or asset_id

    def icon(self, asset_id: str, kind: str) -> str:
        entry = self._section(kind).get(asset_id) or {}
        return icon_path(entry.get('icon'), kind)

    def unit_cost(self, unit_id: str) -> int:
        return int((self.units.get(unit_id) or {}).get('cost') or 0)

    def unit_traits(self, unit_id: str) -> dict[str, Any]:
        return dict((self.units.get(unit_id) or {}).get('traits') or {})

    def item_category(self, item_id: str) -> Optional[str]:
        return (self.items.get(item_id) or {}).get('category')

    def tier_icon(self, trait_id: str, num_units: int) -> str:
        """Icon for the highest trait breakpoint reached by ``num_units``.

        Uses the breakpoint's own icon when given, otherwise
        ``{trait_id}_{bronze|silver|gold|diamond}.png``.
        """
        trait = self.traits.get(trait_id)
        if not trait_id or not trait:
            return DEFAULT_ICON
        tiers = trait.get('tiers') or []
        level = -1
        for i, tier in enumerate(tiers):
            if num_units >= (tier.get('units') or 0):
                level = i
            else:
                break
        if level == -1:
            return icon_path(trait.get('icon'), 'trait')
        if tiers[level].get('icon'):
            return icon_path(tiers[level]['icon'], 'trait')
        if level >= len(TIER_NAMES):
            return icon_path(trait.get('icon'), 'trait')
        return f"{ASSET_PATHS['trait']}{trait_id}_{TIER_NAMES[level]}.png"


def _load_json(path: Path) -> dict:
    if not path.exists():
        logger.warning(f"Mapping file not found: {path}")
        return {}
    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.error(f"Could not read mapping file {path}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}

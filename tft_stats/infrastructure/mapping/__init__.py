"""Static game asset mapping."""
from .asset_catalog import DEFAULT_ICON, GameAssetCatalog, icon_path

__all__ = [
    'DEFAULT_ICON',
    'GameAssetCatalog',
    'icon_path',
]

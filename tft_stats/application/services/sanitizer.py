"""Rebuild stats payloads into a strict, JSON-safe and size-bounded shape."""
import json
import logging
import math
from typing import Any, Callable, Optional

from tft_stats.config import settings

logger = logging.getLogger(__name__)

ENTITY_KEYS = ('compositions', 'units', 'traits', 'items')
_DROP = object()


def _num(value: Any, default: float = 0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value if math.isfinite(value) else default


def _str(value: Any, default: str = '') -> str:
    return value if isinstance(value, str) and value else default


def _json_safe(value: Any) -> Any:
    """Copy plain JSON values; non-finite floats become 0 and anything else is dropped."""
    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, (int, float)):
        return _num(value)
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if not isinstance(k, str):
                continue
            safe = _json_safe(v)
            if safe is not _DROP:
                out[k] = safe
        return out
    if isinstance(value, (list, tuple)):
        return [s for s in (_json_safe(v) for v in value) if s is not _DROP]
    return _DROP


def _list(value: Any, fn: Callable[[dict], dict], cap: Optional[int] = None) -> list[dict]:
    if not isinstance(value, list):
        return []
    out = [fn(v) for v in value if isinstance(v, dict)]
    return out[:cap] if cap is not None else out


def _stats(entity: dict) -> dict:
    nested = entity.get('stats') if isinstance(entity.get('stats'), dict) else {}
    return {
        key: _num(entity.get(key)) or _num(nested.get(key))
        for key in ('count', 'avgPlacement', 'winRate', 'top4Rate')
    }


def _headline(entity: dict) -> dict:
    return {
        'count': _num(entity.get('count')),
        'avgPlacement': _num(entity.get('avgPlacement')),
        'winRate': _num(entity.get('winRate')),
        'top4Rate': _num(entity.get('top4Rate')),
    }


def _related(comp: dict) -> dict:
    return {
        'id': _str(comp.get('id'), 'unknown'),
        'name': _str(comp.get('name'), 'Unknown Composition'),
        'icon': _str(comp.get('icon')),
        **_headline(comp),
        'traits': [],
        'units': [],
    }


def _related_list(value: Any) -> list[dict]:
    return _list(value, _related, cap=settings.MAX_RELATED_COMPS)


def _item_ref(item: dict) -> dict:
    return {
        'id': _str(item.get('id'), 'unknown'),
        'name': _str(item.get('name'), 'Unknown Item'),
        'icon': _str(item.get('icon')),
    }


def _best_item(item: dict) -> dict:
    return {**_item_ref(item), 'stats': _stats(item)}


def _comp_item(item: dict) -> dict:
    return {**_item_ref(item), 'category': _str(item.get('category'), 'unknown'), 'stats': _stats(item)}


def _comp_unit(unit: dict) -> dict:
    return {
        'id': _str(unit.get('id'), 'unknown'),
        'name': _str(unit.get('name'), 'Unknown Unit'),
        'icon': _str(unit.get('icon')),
        'cost': _num(unit.get('cost')),
        'count': _num(unit.get('count')),
        'stats': _stats(unit),
        'items': _list(unit.get('items'), _comp_item),
    }


def _trait(trait: dict, with_stats: bool = True) -> dict:
    data = {
        'id': _str(trait.get('id'), 'unknown'),
        'name': _str(trait.get('name'), 'Unknown Trait'),
        'icon': _str(trait.get('icon')),
        'tier': _num(trait.get('tier')),
        'numUnits': _num(trait.get('numUnits')),
        'tierIcon': _str(trait.get('tierIcon')),
        'stats': _stats(trait),
    }
    if with_stats:
        data.update(_headline(trait))
        data['playRate'] = _num(trait.get('playRate'))
        data['relatedComps'] = _related_list(trait.get('relatedComps'))
    return data


def _composition(comp: dict) -> dict:
    regions = comp.get('regions') if isinstance(comp.get('regions'), dict) else {}
    return {
        'id': _str(comp.get('id'), 'unknown'),
        'name': _str(comp.get('name'), 'Unknown Composition'),
        'icon': _str(comp.get('icon')),
        **_headline(comp),
        'playRate': _num(comp.get('playRate')),
        'stats': _stats(comp),
        'traits': _list(comp.get('traits'), lambda t: _trait(t, with_stats=False)),
        'units': _list(comp.get('units'), _comp_unit),
        'placementData': _list(
            comp.get('placementData'),
            lambda p: {'placement': _num(p.get('placement')), 'count': _num(p.get('count'))},
        ),
        'regions': {str(k): _num(v) for k, v in regions.items()},
    }


def _unit(unit: dict) -> dict:
    traits = _json_safe(unit.get('traits')) if isinstance(unit.get('traits'), dict) else {}
    return {
        'id': _str(unit.get('id'), 'unknown'),
        'name': _str(unit.get('name'), 'Unknown Unit'),
        'icon': _str(unit.get('icon')),
        'cost': _num(unit.get('cost')),
        **_headline(unit),
        'playRate': _num(unit.get('playRate')),
        'stats': _stats(unit),
        'traits': traits,
        'bestItems': _list(unit.get('bestItems'), _best_item),
        'relatedComps': _related_list(unit.get('relatedComps')),
    }


def _unit_with_item(unit: dict) -> dict:
    return {
        'id': _str(unit.get('id'), 'unknown'),
        'name': _str(unit.get('name'), 'Unknown Unit'),
        'icon': _str(unit.get('icon')),
        'cost': _num(unit.get('cost')),
        'count': _num(unit.get('count')),
        'winRate': _num(unit.get('winRate')),
        'avgPlacement': _num(unit.get('avgPlacement')),
        'stats': _stats(unit),
        'relatedComps': _related_list(unit.get('relatedComps')),
    }


def _item(item: dict) -> dict:
    def combo(c: dict) -> dict:
        main = c.get('mainItem') if isinstance(c.get('mainItem'), dict) else item
        return {
            'mainItem': _item_ref(main),
            'items': _list(c.get('items'), _item_ref),
            'winRate': _num(c.get('winRate')),
            'frequency': _num(c.get('frequency')),
        }

    return {
        'id': _str(item.get('id'), 'unknown'),
        'name': _str(item.get('name'), 'Unknown Item'),
        'icon': _str(item.get('icon')),
        'category': _str(item.get('category'), 'unknown'),
        **_headline(item),
        'playRate': _num(item.get('playRate')),
        'stats': _stats(item),
        'unitsWithItem': _list(item.get('unitsWithItem'), _unit_with_item),
        'relatedComps': _related_list(item.get('relatedComps')),
        'combos': _list(item.get('combos'), combo),
    }


_ENTITY_SANITIZERS = {
    'compositions': _composition,
    'units': _unit,
    'traits': _trait,
    'items': _item,
}
_SUMMARY_TOP_KEYS = {
    'topComps': _composition,
    'topUnits': _unit,
    'topTraits': _trait,
    'topItems': _item,
}


def _empty(region: str = 'unknown') -> dict:
    return {
        'region': region,
        'summary': {'totalGames': 0, 'avgPlacement': 0},
        **{key: [] for key in ENTITY_KEYS},
    }


def _encoded_size(payload: dict) -> int:
    return len(json.dumps(payload, separators=(',', ':')).encode('utf-8'))


def sanitize_for_database(payload: Any, max_bytes: Optional[int] = None) -> dict:
    """Return a freshly built copy of ``payload`` that is safe to store.

    Only known fields survive, with defaults for missing ones. Numbers that
    are not finite become 0, related-composition lists are capped, and the
    largest entity list is trimmed from the tail until the encoded payload
    fits ``max_bytes``.
    """
    if not isinstance(payload, dict):
        return _empty()
    max_bytes = settings.MAX_PAYLOAD_BYTES if max_bytes is None else max_bytes

    summary_in = payload.get('summary') if isinstance(payload.get('summary'), dict) else {}
    summary = {
        'totalGames': _num(summary_in.get('totalGames')),
        'avgPlacement': _num(summary_in.get('avgPlacement')),
    }
    for key, fn in _SUMMARY_TOP_KEYS.items():
        if key in summary_in:
            summary[key] = _list(summary_in.get(key), fn)

    sanitized = {'region': _str(payload.get('region'), 'unknown'), 'summary': summary}
    for key, fn in _ENTITY_SANITIZERS.items():
        sanitized[key] = _list(payload.get(key), fn)

    size = _encoded_size(sanitized)
    while size > max_bytes:
        key = max(ENTITY_KEYS, key=lambda k: len(sanitized[k]))
        entities = sanitized[key]
        if not entities:
            logger.warning(f"Payload for {sanitized['region']} still {size} bytes with no entities left")
            break
        drop = max(1, len(entities) // 10)
        sanitized[key] = entities[:-drop]
        logger.warning(f"Trimmed {drop} {key} from {sanitized['region']} payload ({size} bytes > {max_bytes})")
        size = _encoded_size(sanitized)

    return sanitized

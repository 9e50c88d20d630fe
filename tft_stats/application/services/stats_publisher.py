"""Package one entity type for one region and persist it."""
import json
import logging
from typing import Union

from tft_stats.domain.entities import ProcessedData
from tft_stats.domain.enums import EntityType
from tft_stats.domain.interfaces import IStatsRepository
from .aggregation_service import extract_items, extract_traits, extract_units, items_to_dicts
from .sanitizer import sanitize_for_database

logger = logging.getLogger(__name__)

TOP_ENTITIES = 5


def _win_rate(entity: dict) -> float:
    return entity.get('winRate') or 0


def build_entities(data: ProcessedData, entity_type: EntityType) -> list[dict]:
    """Serialized entities of ``entity_type``, best win rate first."""
    if entity_type is EntityType.COMPOSITIONS:
        entities = [c.to_dict() for c in data.compositions]
    elif entity_type is EntityType.UNITS:
        entities = [u.to_dict() for u in extract_units(data.compositions)]
    elif entity_type is EntityType.TRAITS:
        entities = [t.to_dict() for t in extract_traits(data.compositions)]
    else:
        entities = items_to_dicts(extract_items(data.compositions))
    return sorted(entities, key=_win_rate, reverse=True)


def save_entity_data(
    repository: IStatsRepository,
    data: ProcessedData,
    region: str,
    entity_type: Union[EntityType, str],
) -> bool:
    """Build, sanitize and store ``{region, summary, <entity_type>: [...]}``.

    Returns False when there is nothing to store or the store fails.
    """
    entity_type = EntityType.parse(entity_type) if isinstance(entity_type, str) else entity_type
    if data is None:
        logger.error(f"No data to save for {entity_type.value}/{region}")
        return False
    try:
        entities = build_entities(data, entity_type)
        if not entities:
            logger.warning(f"No {entity_type.value} to save for {region}")
            return False

        summary = {
            'totalGames': data.total_games,
            'avgPlacement': data.avg_placement,
            entity_type.summary_key: entities[:TOP_ENTITIES],
        }
        payload = sanitize_for_database({
            'region': region,
            'summary': summary,
            entity_type.value: entities,
        })
        logger.info(
            f"Sanitized {entity_type.value} data for {region}: "
            f"{round(len(json.dumps(payload)) / 1024)}KB"
        )
        return repository.save_stats(entity_type.value, region, payload)
    except Exception as exc:
        logger.error(f"Failed to save {entity_type.value} data for {region}: {exc}")
        return False

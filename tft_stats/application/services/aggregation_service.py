"""Fold compositions into unit, trait and item aggregates.

All three extractors weight a composition by ``Composition.weight`` (its
``count``, or 1 when missing) so that every average is
``sum(metric * weight) / sum(weight)``. Averages are derived once after the
fold and ``play_rate`` is set only when every entity has been folded.
"""
import logging
from typing import Iterable, Sequence, TypeVar

from tft_stats.domain.entities import (
    Composition,
    ItemAggregate,
    ItemCombo,
    TraitAggregate,
    UnitAggregate,
    UnitWithItem,
)

logger = logging.getLogger(__name__)

A = TypeVar('A', UnitAggregate, TraitAggregate, ItemAggregate)

MIN_COMBO_APPEARANCES = 2
MAX_COMBOS_PER_ITEM = 5


def _assign_play_rates(aggregates: Sequence[A]) -> list[A]:
    total = sum(a.count for a in aggregates)
    for a in aggregates:
        a.play_rate = a.count / total * 100 if total else 0.0
    return list(aggregates)


def extract_units(compositions: Iterable[Composition]) -> list[UnitAggregate]:
    compositions = list(compositions)
    logger.info(f"Extracting units from {len(compositions)} compositions")
    units: dict[str, UnitAggregate] = {}
    for comp in compositions:
        for unit in comp.units:
            agg = units.get(unit.id)
            if agg is None:
                agg = units[unit.id] = UnitAggregate(
                    id=unit.id,
                    name=unit.name,
                    icon=unit.icon,
                    cost=unit.cost,
                    traits=dict(unit.traits),
                    best_items=list(unit.best_items),
                )
            agg.fold(comp)
    result = _assign_play_rates(list(units.values()))
    logger.info(f"Extracted {len(result)} units")
    return result


def extract_traits(compositions: Iterable[Composition]) -> list[TraitAggregate]:
    """One aggregate per ``(trait id, tier)``."""
    compositions = list(compositions)
    logger.info(f"Extracting traits from {len(compositions)} compositions")
    traits: dict[tuple[str, int], TraitAggregate] = {}
    for comp in compositions:
        for trait in comp.traits:
            key = (trait.id, trait.tier or 0)
            agg = traits.get(key)
            if agg is None:
                agg = traits[key] = TraitAggregate(
                    id=trait.id,
                    name=trait.name,
                    icon=trait.icon,
                    tier=trait.tier or 0,
                    num_units=trait.num_units or 0,
                    tier_icon=trait.tier_icon,
                )
            agg.fold(comp)
    result = _assign_play_rates(list(traits.values()))
    logger.info(f"Extracted {len(result)} traits")
    return result


def extract_items(compositions: Iterable[Composition]) -> list[ItemAggregate]:
    """Item aggregates with their per-unit breakdown and item combinations."""
    compositions = list(compositions)
    logger.info(f"Extracting items from {len(compositions)} compositions")
    items: dict[str, ItemAggregate] = {}
    combos: dict[str, dict[tuple[str, ...], ItemCombo]] = {}

    for comp in compositions:
        for unit in comp.units:
            item_ids = [i.id for i in unit.items]
            for item in unit.items:
                agg = items.get(item.id)
                if agg is None:
                    agg = items[item.id] = ItemAggregate(
                        id=item.id, name=item.name, icon=item.icon, category=item.category
                    )
                agg.fold(comp)

                carrier = agg.units.get(unit.id)
                if carrier is None:
                    carrier = agg.units[unit.id] = UnitWithItem(
                        id=unit.id, name=unit.name, icon=unit.icon, cost=unit.cost
                    )
                carrier.fold(comp)

                others = tuple(sorted(i for i in item_ids if i != item.id))
                if others:
                    combo = combos.setdefault(item.id, {}).setdefault(
                        others, ItemCombo(main_item_id=item.id, item_ids=others)
                    )
                    combo.appearances += 1
                    combo.weight += comp.weight
                    combo.win_rate_sum += (comp.win_rate or 0.0) * comp.weight

    for item_id, agg in items.items():
        agg.combos = _rank_combos(combos.get(item_id, {}).values(), len(agg.units))

    result = _assign_play_rates(list(items.values()))
    logger.info(f"Extracted {len(result)} items")
    return result


def _rank_combos(candidates: Iterable[ItemCombo], carrier_count: int) -> list[ItemCombo]:
    kept = [c for c in candidates if c.appearances >= MIN_COMBO_APPEARANCES]
    for c in kept:
        c.frequency = c.appearances / (carrier_count or 1)
    kept.sort(key=lambda c: c.win_rate, reverse=True)
    return kept[:MAX_COMBOS_PER_ITEM]


def items_to_dicts(items: Sequence[ItemAggregate]) -> list[dict]:
    """Serialize items, resolving combo item ids to id/name/icon references."""
    refs = {i.id: i.ref() for i in items}
    return [i.to_dict(refs) for i in items]

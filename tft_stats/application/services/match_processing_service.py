"""Turn normalized matches into composition statistics.

Every participant's final board becomes one candidate. Unrealistic boards are
dropped, the rest are grouped by their two most significant traits, and each
group with enough games becomes a ``Composition``.
"""
import logging
import re
from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from statistics import fmean
from typing import Iterable, Optional

from tft_stats.config import settings
from tft_stats.domain.entities import (
    Composition,
    CompositionItem,
    CompositionTrait,
    CompositionUnit,
    ProcessedData,
    ProcessedMatch,
)
from tft_stats.infrastructure.mapping import GameAssetCatalog

logger = logging.getLogger(__name__)

OTHER_GROUP = 'Other'


@dataclass
class Board:
    """One participant's final team in one match."""

    id: str
    placement: int
    region: str
    traits: list[CompositionTrait] = field(default_factory=list)
    units: list[CompositionUnit] = field(default_factory=list)


def build_boards(matches: Iterable[ProcessedMatch], catalog: GameAssetCatalog) -> list[Board]:
    boards = []
    for match in matches:
        for p in match.participants:
            traits = [
                CompositionTrait(
                    id=t.name,
                    name=catalog.display_name(t.name, 'trait'),
                    icon=catalog.icon(t.name, 'trait'),
                    tier=t.tier_current,
                    num_units=t.num_units,
                    tier_icon=catalog.tier_icon(t.name, t.num_units),
                )
                for t in p.traits
                if t.tier_current >= 1
            ]
            traits.sort(key=lambda t: (-t.tier, t.name))
            units = [
                CompositionUnit(
                    id=u.name,
                    name=catalog.display_name(u.name, 'unit'),
                    icon=catalog.icon(u.name, 'unit'),
                    cost=catalog.unit_cost(u.name),
                    traits=catalog.unit_traits(u.name),
                    items=[
                        CompositionItem(
                            id=item,
                            name=catalog.display_name(item, 'item'),
                            icon=catalog.icon(item, 'item'),
                            category=catalog.item_category(item),
                        )
                        for item in u.item_names
                        if item
                    ],
                )
                for u in p.units
            ]
            boards.append(Board(
                id=f"{match.id}-{p.placement}",
                placement=p.placement,
                region=match.region or 'unknown',
                traits=traits,
                units=units,
            ))
    return boards


def is_realistic_board(board: Board) -> bool:
    """Reject boards no real game produces."""
    total_units = len(board.units)
    if sum(1 for u in board.units if u.cost == 5) > 3:
        return False
    if sum(1 for t in board.traits if t.tier == 4) > 1:
        return False
    if sum(1 for t in board.traits if t.tier == 3) > 3:
        return False
    if total_units < 5 or total_units > 10:
        return False
    if sum(u.cost for u in board.units) / total_units > 4:
        return False
    full_items = sum(1 for u in board.units if len(u.items) == 3)
    if full_items > total_units * 0.7:
        return False
    return True


def composition_key(board: Board) -> str:
    """``"{n} {trait} & {n} {trait}"`` from the two biggest tier>1 traits."""
    significant = sorted(
        (t for t in board.traits if t.tier > 1 and t.num_units > 1),
        key=lambda t: (-t.num_units, t.name),
    )[:2]
    key = ' & '.join(f"{t.num_units} {t.name}" for t in significant)
    return key or OTHER_GROUP


def _board_stats(placements: list[int]) -> dict[str, float]:
    return {
        'count': len(placements),
        'avgPlacement': fmean(placements),
        'winRate': sum(1 for p in placements if p == 1) / len(placements) * 100,
        'top4Rate': sum(1 for p in placements if p <= 4) / len(placements) * 100,
    }


def attach_best_items(boards: list[Board], limit: int = 3) -> None:
    """Set ``best_items`` on every unit: its top items by win rate across all boards."""
    placements: dict[str, dict[str, list[int]]] = defaultdict(lambda: defaultdict(list))
    first_seen: dict[str, CompositionItem] = {}
    for board in boards:
        for unit in board.units:
            for item in unit.items:
                placements[unit.id][item.id].append(board.placement)
                first_seen.setdefault(item.id, item)

    best: dict[str, list[dict]] = {}
    for unit_id, by_item in placements.items():
        ranked = sorted(
            ((item_id, _board_stats(p)) for item_id, p in by_item.items()),
            key=lambda pair: pair[1]['winRate'],
            reverse=True,
        )[:limit]
        best[unit_id] = [{**first_seen[item_id].to_dict(), 'stats': stats} for item_id, stats in ranked]

    for board in boards:
        for unit in board.units:
            unit.best_items = best.get(unit.id, [])


def _slug(name: str) -> str:
    return re.sub(r'\s+', '-', name).lower()


def _unique_traits(boards: list[Board]) -> list[CompositionTrait]:
    seen: dict[str, CompositionTrait] = {}
    for board in boards:
        for trait in board.traits:
            seen.setdefault(trait.id, trait)
    return sorted(seen.values(), key=lambda t: -t.tier)


def _grouped_units(boards: list[Board]) -> list[CompositionUnit]:
    first: dict[str, CompositionUnit] = {}
    counts: Counter = Counter()
    for board in boards:
        for unit in board.units:
            first.setdefault(unit.id, unit)
            counts[unit.id] += 1
    units = [replace(first[uid], count=n) for uid, n in counts.items()]
    units.sort(key=lambda u: (u.count, u.cost), reverse=True)
    return units


def build_composition(name: str, boards: list[Board], total_boards: int) -> Composition:
    traits = _unique_traits(boards)
    significant = [t for t in traits if t.tier > 1]
    if significant:
        icon = significant[0].tier_icon or significant[0].icon
    elif traits:
        icon = traits[0].tier_icon or traits[0].icon
    else:
        icon = ''
    stats = _board_stats([b.placement for b in boards])
    return Composition(
        id=_slug(name),
        name=name,
        icon=icon,
        count=len(boards),
        avg_placement=stats['avgPlacement'],
        win_rate=min(stats['winRate'], 100.0),
        top4_rate=min(stats['top4Rate'], 100.0),
        play_rate=len(boards) / total_boards * 100 if total_boards else 0.0,
        traits=traits,
        units=_grouped_units(boards),
        placement_data=dict(sorted(Counter(b.placement for b in boards).items())),
        regions=dict(Counter(b.region for b in boards)),
    )


def process_match_data(
    matches: list[ProcessedMatch],
    region: Optional[str] = None,
    catalog: Optional[GameAssetCatalog] = None,
    min_games: Optional[int] = None,
) -> ProcessedData:
    """Build compositions for ``region`` (every region when None or ``all``)."""
    if region and region.lower() != 'all':
        matches = [m for m in matches if (m.region or '').upper() == region.upper()]
    if not matches:
        return ProcessedData(region=region)

    catalog = catalog or GameAssetCatalog()
    min_games = settings.MIN_COMPOSITION_GAMES if min_games is None else min_games

    boards = build_boards(matches, catalog)
    if not boards:
        return ProcessedData(total_games=len(matches), region=region)
    attach_best_items(boards)

    groups: dict[str, list[Board]] = defaultdict(list)
    realistic = 0
    for board in boards:
        if is_realistic_board(board):
            realistic += 1
            groups[composition_key(board)].append(board)

    compositions = [
        build_composition(name, group, len(boards))
        for name, group in groups.items()
        if name != OTHER_GROUP
    ]
    compositions = [c for c in compositions if c.count >= min_games]
    compositions.sort(key=lambda c: c.count, reverse=True)

    logger.info(
        f"{region or 'all'}: {len(boards)} boards, {realistic} realistic, {len(compositions)} compositions"
    )
    return ProcessedData(
        compositions=compositions,
        total_games=len(matches),
        avg_placement=fmean(b.placement for b in boards),
        region=region,
    )

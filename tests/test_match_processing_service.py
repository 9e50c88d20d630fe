import pytest

from tft_stats.application.services.match_processing_service import (
    Board,
    composition_key,
    is_realistic_board,
    process_match_data,
)
from tft_stats.domain.entities import CompositionItem, CompositionTrait, CompositionUnit, ProcessedMatch
from tft_stats.infrastructure.mapping import GameAssetCatalog

from conftest import riot_match

SOLO_TRAITS = [{"name": "Set13_Solo", "num_units": 1, "style": 1}]


def _matches(region="EUW", n=3, prefix="M"):
    return [ProcessedMatch.from_riot(riot_match(f"{prefix}{i}"), region) for i in range(n)]


def _board(units=6, cost=1, traits=(), full_items=0):
    return Board(
        id="b",
        placement=1,
        region="EUW",
        traits=list(traits),
        units=[
            CompositionUnit(
                id=f"U{i}",
                name=f"U{i}",
                cost=cost,
                items=[CompositionItem(id=f"I{j}", name=f"I{j}") for j in range(3 if i < full_items else 0)],
            )
            for i in range(units)
        ],
    )


def test_groups_boards_by_their_two_biggest_traits():
    data = process_match_data(_matches(), "all")

    [comp] = data.compositions
    assert comp.name == "4 Set13_Sniper & 3 Set13_Rebel"
    assert comp.id == "4-set13_sniper-&-3-set13_rebel"
    assert comp.count == 6
    assert comp.avg_placement == pytest.approx(3.0)
    assert comp.win_rate == pytest.approx(50.0)
    assert comp.top4_rate == pytest.approx(50.0)
    assert comp.placement_data == {1: 3, 5: 3}
    assert comp.regions == {"EUW": 6}
    assert data.total_games == 3
    assert data.avg_placement == pytest.approx(3.0)


def test_group_units_carry_board_counts_and_best_items():
    [comp] = process_match_data(_matches(), "all").compositions
    carry = next(u for u in comp.units if u.id == "TFT13_Unit0")
    assert carry.count == 6
    assert [i["id"] for i in carry.best_items] == ["TFT_Item_InfinityEdge"]
    assert carry.best_items[0]["stats"]["winRate"] == pytest.approx(50.0)
    assert "Set13_Inactive" not in {t.id for t in comp.traits}


def test_region_filter_and_minimum_games():
    matches = _matches("EUW", 3) + _matches("KR", 1, prefix="K")
    assert process_match_data(matches, "KR").compositions[0].count == 2
    assert process_match_data(matches, "KR", min_games=3).is_empty
    assert process_match_data(matches, "NA").is_empty
    assert process_match_data([], "all").total_games == 0


def test_boards_without_significant_traits_are_not_published():
    matches = [ProcessedMatch.from_riot(riot_match(f"S{i}", traits=SOLO_TRAITS), "EUW") for i in range(3)]
    data = process_match_data(matches, "all")
    assert data.is_empty
    assert data.total_games == 3


def test_catalog_supplies_names_icons_and_costs():
    catalog = GameAssetCatalog(
        traits={"Set13_Sniper": {"name": "Sniper", "icon": "sniper.png", "tiers": [{"units": 2}, {"units": 4}]}},
        units={"TFT13_Unit0": {"name": "Jinx", "cost": 4, "icon": "jinx.png"}},
        items={"TFT_Item_InfinityEdge": {"name": "Infinity Edge", "category": "completed"}},
    )
    [comp] = process_match_data(_matches(), "all", catalog=catalog).compositions
    assert comp.name == "4 Sniper & 3 Set13_Rebel"
    sniper = next(t for t in comp.traits if t.id == "Set13_Sniper")
    assert sniper.tier_icon == "/assets/traits/Set13_Sniper_silver.png"
    assert sniper.icon == "/assets/traits/sniper.png"
    jinx = next(u for u in comp.units if u.id == "TFT13_Unit0")
    assert (jinx.name, jinx.cost, jinx.icon) == ("Jinx", 4, "/assets/units/jinx.png")
    assert jinx.items[0].category == "completed"


@pytest.mark.parametrize(
    "board, expected",
    [
        (_board(), True),
        (_board(units=4), False),
        (_board(units=11), False),
        (_board(cost=5), False),
        (_board(full_items=5), False),
        (_board(traits=[CompositionTrait(id=f"T{i}", name=f"T{i}", tier=4) for i in range(2)]), False),
        (_board(traits=[CompositionTrait(id=f"T{i}", name=f"T{i}", tier=3) for i in range(4)]), False),
    ],
)
def test_realistic_board_rules(board, expected):
    assert is_realistic_board(board) is expected


def test_composition_key_falls_back_to_other():
    board = _board(traits=[CompositionTrait(id="A", name="A", tier=1, num_units=3)])
    assert composition_key(board) == "Other"

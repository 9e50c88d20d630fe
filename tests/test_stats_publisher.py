from tft_stats.application.services.stats_publisher import build_entities, save_entity_data
from tft_stats.domain.entities import CompositionTrait, ProcessedData
from tft_stats.domain.enums import EntityType

from conftest import make_comp, make_unit


def _data():
    comps = [
        make_comp(
            f"comp-{i}",
            count=i + 1,
            win_rate=10.0 * i,
            units=(make_unit(f"Unit{i}", items=("IE", "LW")), make_unit("Shared")),
            traits=(CompositionTrait(id=f"Trait{i}", name=f"Trait{i}", tier=2, num_units=3),),
        )
        for i in range(7)
    ]
    return ProcessedData(compositions=comps, total_games=40, avg_placement=4.5, region="EUW")


def test_units_payload_shape(repository):
    assert save_entity_data(repository, _data(), "EUW", EntityType.UNITS)

    [(entity_type, region, payload)] = repository.stats
    assert (entity_type, region) == ("units", "EUW")
    assert payload["region"] == "EUW"
    assert payload["summary"]["totalGames"] == 40
    assert payload["summary"]["avgPlacement"] == 4.5
    assert len(payload["summary"]["topUnits"]) == 5
    assert len(payload["units"]) == 8
    rates = [u["winRate"] for u in payload["units"]]
    assert rates == sorted(rates, reverse=True)


def test_compositions_use_top_comps_summary_key(repository):
    assert save_entity_data(repository, _data(), "all", "compositions")
    payload = repository.get_stats("compositions", "all")
    assert [c["id"] for c in payload["summary"]["topComps"]] == ["comp-6", "comp-5", "comp-4", "comp-3", "comp-2"]


def test_items_and_traits_are_published(repository):
    data = _data()
    assert save_entity_data(repository, data, "EUW", EntityType.ITEMS)
    assert save_entity_data(repository, data, "EUW", EntityType.TRAITS)
    items = repository.get_stats("items", "EUW")
    assert {i["id"] for i in items["items"]} == {"IE", "LW"}
    assert items["items"][0]["combos"]
    assert len(repository.get_stats("traits", "EUW")["summary"]["topTraits"]) == 5


def test_nothing_to_publish_returns_false(repository):
    assert save_entity_data(repository, ProcessedData(), "EUW", EntityType.UNITS) is False
    assert save_entity_data(repository, None, "EUW", EntityType.UNITS) is False
    assert repository.stats == []


def test_build_entities_sorted_by_win_rate():
    entities = build_entities(_data(), EntityType.TRAITS)
    assert [e["id"] for e in entities][:2] == ["Trait6", "Trait5"]

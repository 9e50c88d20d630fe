import pytest

from tft_stats.domain.enums import Continent, EntityType, Region


def test_region_lookup_by_key_or_platform():
    assert Region.from_key("euw") is Region.EUW
    assert Region.from_key("EUN1") is Region.EUNE
    with pytest.raises(ValueError):
        Region.from_key("mars")


def test_every_region_belongs_to_one_continent():
    grouped = [r for c in Continent for r in c.regions]
    assert sorted(grouped, key=lambda r: r.name) == sorted(Region, key=lambda r: r.name)
    assert Region.OCE.continent is Continent.SEA
    assert Region.KR.continent.host == "asia.api.riotgames.com"


def test_entity_type_summary_keys():
    assert EntityType.parse(" Units ") is EntityType.UNITS
    assert [e.summary_key for e in EntityType] == ["topComps", "topUnits", "topTraits", "topItems"]
    with pytest.raises(ValueError, match="Invalid entity type"):
        EntityType.parse("champions")

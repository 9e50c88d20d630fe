import asyncio

from tft_stats.application.services.region_processor import RegionProcessor
from tft_stats.domain.enums import Region
from tft_stats.infrastructure.api import RiotCredentialError

from conftest import riot_match


class StubClient:
    def __init__(self, league=None, match_ids=None, failing_matches=(), malformed_matches=()):
        self.league = league
        self.match_ids = match_ids or {}
        self.failing_matches = set(failing_matches)
        self.malformed_matches = set(malformed_matches)
        self.match_requests = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_master_league(self, region):
        return self.league

    async def get_summoner(self, region, summoner_id):
        return {"puuid": f"puuid-{summoner_id}"}

    async def get_summoner_by_puuid(self, region, puuid):
        return {"puuid": puuid}

    async def get_match_ids(self, region, puuid, count=100):
        return self.match_ids.get(puuid, [])

    async def get_match(self, region, match_id):
        self.match_requests.append(match_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        if match_id in self.failing_matches:
            raise RuntimeError("detail fetch failed")
        match = riot_match(match_id)
        if match_id in self.malformed_matches:
            match["info"]["participants"].append(None)
        return match


def _process(client, repository, **kwargs):
    processor = RegionProcessor(client, repository, top_players=10, batch_size=2, batch_delay=0)
    return asyncio.run(processor.process_region(Region.EUW, kwargs.get("matches_per_region", 100)))


def test_empty_league_marks_region_degraded(repository):
    matches = _process(StubClient(league={"entries": []}), repository)
    assert matches == []
    assert repository.statuses["EUW"]["status"] == "degraded"
    assert repository.statuses["EUW"]["last_error"] == "No league data available"


def test_missing_league_marks_region_degraded(repository):
    assert _process(StubClient(league=None), repository) == []
    assert repository.statuses["EUW"]["status"] == "degraded"


def test_no_match_ids_marks_region_degraded(repository):
    client = StubClient(league={"entries": [{"summonerId": "s1", "leaguePoints": 10}]})
    assert _process(client, repository) == []
    assert repository.statuses["EUW"]["last_error"] == "No matches found"


def test_fetches_deduplicates_and_normalizes_matches(repository):
    client = StubClient(
        league={"entries": [
            {"summonerId": "s1", "leaguePoints": 900},
            {"puuid": "p2", "leaguePoints": 800},
        ]},
        match_ids={"puuid-s1": ["EUW1_1", "EUW1_2", "EUW1_3"], "p2": ["EUW1_2", "EUW1_4", "EUW1_5"]},
        failing_matches={"EUW1_4"},
    )
    matches = _process(client, repository)

    assert sorted(client.match_requests) == ["EUW1_1", "EUW1_2", "EUW1_3", "EUW1_4", "EUW1_5"]
    assert [m.id for m in matches] == ["EUW1_1", "EUW1_2", "EUW1_3", "EUW1_5"]
    assert all(m.region == "EUW" for m in matches)
    assert set(repository.matches) == {"EUW1_1", "EUW1_2", "EUW1_3", "EUW1_5"}
    assert [s for _, s, _ in repository.status_history] == ["processing", "active"]


def test_respects_matches_per_region(repository):
    client = StubClient(
        league={"entries": [{"summonerId": "s1", "leaguePoints": 1}]},
        match_ids={"puuid-s1": [f"EUW1_{i}" for i in range(10)]},
    )
    matches = _process(client, repository, matches_per_region=3)
    assert len(matches) == 3


def test_only_top_players_by_league_points_are_used(repository):
    entries = [{"summonerId": f"s{i}", "leaguePoints": i} for i in range(20)]
    client = StubClient(league={"entries": entries}, match_ids={"puuid-s19": ["EUW1_top"], "puuid-s0": ["EUW1_low"]})
    processor = RegionProcessor(client, repository, top_players=1, batch_delay=0)
    matches = asyncio.run(processor.process_region(Region.EUW, 10))
    assert [m.id for m in matches] == ["EUW1_top"]


def test_unexpected_error_marks_region_error_without_raising(repository):
    class Exploding(StubClient):
        async def get_master_league(self, region):
            raise RiotCredentialError("Riot API rejected the API key (403)", status_code=403)

    assert _process(Exploding(), repository) == []
    status = repository.statuses["EUW"]
    assert status["status"] == "error"
    assert "403" in status["last_error"]
    assert status["error_count"] == 1


def test_malformed_match_is_skipped_and_region_stays_active(repository):
    client = StubClient(
        league={"entries": [{"summonerId": "s1", "leaguePoints": 1}]},
        match_ids={"puuid-s1": ["EUW1_good", "EUW1_bad"]},
        malformed_matches={"EUW1_bad"},
    )
    matches = _process(client, repository)

    assert [m.id for m in matches] == ["EUW1_good"]
    assert set(repository.matches) == {"EUW1_good"}
    assert [s for _, s, _ in repository.status_history] == ["processing", "active"]


def test_detail_fetches_are_batched_with_a_pause_between_batches(repository, monkeypatch):
    client = StubClient(
        league={"entries": [{"summonerId": "s1", "leaguePoints": 1}]},
        match_ids={"puuid-s1": [f"EUW1_{i}" for i in range(7)]},
    )
    pauses = []
    real_sleep = asyncio.sleep

    async def recording_sleep(delay):
        if delay == 0.25:
            pauses.append((delay, len(client.match_requests)))
        await real_sleep(delay if delay != 0.25 else 0)

    monkeypatch.setattr("tft_stats.application.services.region_processor.asyncio.sleep", recording_sleep)
    processor = RegionProcessor(client, repository, top_players=1, batch_size=3, batch_delay=0.25)
    matches = asyncio.run(processor.process_region(Region.EUW, 10))

    assert len(matches) == 7
    assert client.max_in_flight == 3
    assert pauses == [(0.25, 3), (0.25, 6)]

import asyncio

import pytest

from tft_stats.application.services.leaderboard_service import LeaderboardService
from tft_stats.domain.enums import Region


class StubLadderClient:
    def __init__(self, leagues, broken_names=()):
        self.leagues = leagues
        self.broken_names = set(broken_names)
        self.tiers_requested = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_league(self, region, tier="master"):
        self.tiers_requested.append((region, tier))
        return self.leagues.get((region, tier))

    async def get_summoner(self, region, summoner_id):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        if summoner_id in self.broken_names:
            raise RuntimeError("lookup failed")
        return {"name": f"N-{summoner_id}"}

    async def get_summoner_by_puuid(self, region, puuid):
        return {}


def _entries(n):
    return [{"summonerId": f"s{i}", "leaguePoints": i * 10, "wins": i, "losses": 1} for i in range(n)]


def test_falls_back_to_lower_tiers_until_one_has_entries():
    client = StubLadderClient({(Region.EUW, "master"): {"entries": _entries(3)}})
    players = asyncio.run(LeaderboardService(client).top_players(Region.EUW, 10))

    assert [t for _, t in client.tiers_requested] == ["challenger", "grandmaster", "master"]
    assert [p["summonerId"] for p in players] == ["s2", "s1", "s0"]
    assert [p["rank"] for p in players] == [1, 2, 3]
    assert {p["tier"] for p in players} == {"MASTER"}
    assert players[0]["summonerName"] == "N-s2"


def test_name_lookups_run_in_capped_batches_and_failures_fall_back():
    client = StubLadderClient({(Region.NA, "challenger"): {"entries": _entries(12)}}, broken_names={"s11"})
    players = asyncio.run(LeaderboardService(client, name_batch_size=4).top_players(Region.NA, 12))

    assert client.max_in_flight == 4
    assert players[0]["summonerId"] == "s11"
    assert players[0]["summonerName"] == "Player 1"
    assert players[1]["summonerName"] == "N-s10"


@pytest.mark.parametrize("limit, expected", [(0, 1), (3, 3), (500, 50)])
def test_limit_is_clamped(limit, expected):
    client = StubLadderClient({(Region.KR, "challenger"): {"entries": _entries(60)}})
    players = asyncio.run(LeaderboardService(client).top_players(Region.KR, limit))
    assert len(players) == expected


def test_empty_ladder_returns_no_players():
    assert asyncio.run(LeaderboardService(StubLadderClient({})).top_players(Region.BR)) == []


def test_global_leader_picks_highest_challenger():
    client = StubLadderClient({
        (Region.EUW, "challenger"): {"entries": [{"summonerId": "e", "leaguePoints": 1500}]},
        (Region.KR, "challenger"): {"entries": [{"summonerId": "k", "leaguePoints": 1400}]},
    })
    leader = asyncio.run(LeaderboardService(client).global_leader())

    assert leader["summonerId"] == "e"
    assert leader["summonerName"] == "N-e"
    assert leader["region"] == "EUW"
    assert leader["leaguePoints"] == 1500
    assert asyncio.run(LeaderboardService(StubLadderClient({})).global_leader()) is None

import httpx
import pytest
from fastapi.testclient import TestClient

from tft_stats.infrastructure.api import RateLimitRegistry, RiotAPIClient
from tft_stats.infrastructure.repositories import SqliteStatsRepository
from tft_stats.presentation.api import create_app

SECRET = "s3cret"
AUTH = {"Authorization": f"Bearer {SECRET}"}


@pytest.fixture
def repo(tmp_path):
    repository = SqliteStatsRepository(tmp_path / "api.sqlite")
    repository.initialize()
    yield repository
    repository.close()


def _client(repo, runner=None, secret=SECRET, riot=None, api_key="test-key"):
    async def default_runner(repository):
        return {"success": True, "matchCount": 0, "regionsProcessed": []}

    def client_factory():
        transport = httpx.MockTransport(riot or (lambda req: httpx.Response(404)))
        return RiotAPIClient(api_key, rate_limits=RateLimitRegistry({}, {}), transport=transport)

    app = create_app(repo, refresh_runner=runner or default_runner, cron_secret=secret, client_factory=client_factory)
    return TestClient(app)


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer wrong"}, {"Authorization": SECRET}])
def test_refresh_requires_bearer_secret(repo, headers):
    response = _client(repo).post("/api/cron/refresh-data", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_refresh_rejected_when_no_secret_configured(repo):
    response = _client(repo, secret="").get("/api/cron/refresh-data", headers={"Authorization": "Bearer "})
    assert response.status_code == 401


@pytest.mark.parametrize("method", ["get", "post"])
def test_refresh_runs_pipeline(repo, method):
    seen = []

    async def runner(repository):
        seen.append(repository)
        return {"success": True, "matchCount": 42, "regionsProcessed": []}

    response = getattr(_client(repo, runner), method)("/api/cron/refresh-data", headers=AUTH)
    assert response.status_code == 200
    assert response.json()["matchCount"] == 42
    assert seen == [repo]


def test_refresh_failure_returns_500(repo):
    async def runner(repository):
        raise RuntimeError("Riot API rejected the API key (403)")

    response = _client(repo, runner).post("/api/cron/refresh-data", headers=AUTH)
    assert response.status_code == 500
    assert response.json() == {"error": "Riot API rejected the API key (403)"}


def test_entities_endpoint(repo):
    repo.save_stats("units", "all", {"region": "all", "summary": {"totalGames": 3}, "units": [{"id": "U"}]})
    client = _client(repo)

    response = client.get("/api/tft/entities/units")
    assert response.status_code == 200
    assert response.json()["units"] == [{"id": "U"}]
    assert response.headers["cache-control"] == "public, s-maxage=3600, stale-while-revalidate=7200"

    assert client.get("/api/tft/entities/units", params={"region": "KR"}).status_code == 404
    invalid = client.get("/api/tft/entities/champions")
    assert invalid.status_code == 400
    assert "Invalid entity type" in invalid.json()["error"]


def test_compositions_endpoint_sets_region(repo):
    repo.save_stats("compositions", "EUW", {"summary": {}, "compositions": []})
    client = _client(repo)

    response = client.get("/api/tft/compositions", params={"region": "EUW"})
    assert response.status_code == 200
    assert response.json()["region"] == "EUW"
    assert client.get("/api/tft/compositions").status_code == 404


def test_region_status_endpoint(repo):
    repo.update_region_status("EUW", "error", "timeout")
    response = _client(repo).get("/api/region-status")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "public, s-maxage=60, stale-while-revalidate=120"
    [status] = response.json()
    assert status["region"] == "EUW"
    assert status["status"] == "error"
    assert status["errorCount"] == 1
    assert status["lastError"] == "timeout"
    assert status["lastUpdated"]


def test_region_query_is_normalized_and_validated(repo):
    repo.save_stats("traits", "EUW", {"region": "EUW", "traits": []})
    client = _client(repo)

    assert client.get("/api/tft/entities/traits", params={"region": "euw1"}).status_code == 200
    invalid = client.get("/api/tft/entities/traits", params={"region": "mars"})
    assert invalid.status_code == 400
    assert "Unknown region" in invalid.json()["error"]


def test_matches_endpoint_prefers_composition_snapshot(repo):
    repo.save_match("EUW1_1", "EUW", {"metadata": {"match_id": "EUW1_1"}})
    repo.save_stats("compositions", "all", {"summary": {}, "compositions": [{"id": "sniper"}, {"name": "no id"}]})
    response = _client(repo).get("/api/tft/matches")

    assert response.status_code == 200
    assert response.json() == [
        {"id": "sniper", "region": "all", "participants": []},
        {"id": "unknown", "region": "all", "participants": []},
    ]
    assert response.headers["cache-control"] == "public, s-maxage=3600, stale-while-revalidate=7200"


def test_matches_endpoint_falls_back_to_stored_matches(repo):
    repo.save_match("EUW1_1", "EUW", {"metadata": {"match_id": "EUW1_1"}})
    repo.save_match("KR_1", "KR", {"metadata": {"match_id": "KR_1"}})
    client = _client(repo)

    response = client.get("/api/tft/matches", params={"region": "euw"})
    assert response.status_code == 200
    assert response.json() == [{"metadata": {"match_id": "EUW1_1"}}]
    assert len(client.get("/api/tft/matches").json()) == 2
    assert client.get("/api/tft/matches", params={"region": "NA"}).status_code == 404


def _ladder(req):
    path = req.url.path
    if path.endswith("/challenger"):
        return httpx.Response(200, json={"entries": []})
    if path.endswith("/grandmaster"):
        return httpx.Response(200, json={"entries": [
            {"summonerId": "s1", "leaguePoints": 700, "wins": 30, "losses": 20},
            {"summonerId": "s2", "leaguePoints": 900, "wins": 40, "losses": 10},
        ]})
    if "/summoners/" in path:
        return httpx.Response(200, json={"name": f"name-{path.rsplit('/', 1)[-1]}"})
    return httpx.Response(404)


def test_leaderboard_endpoint(repo):
    client = _client(repo, riot=_ladder)
    response = client.get("/api/tft/leaderboard", params={"region": "kr", "limit": 1})

    assert response.status_code == 200
    assert response.headers["cache-control"] == "s-maxage=120, stale-while-revalidate=240"
    [top] = response.json()
    assert top["summonerName"] == "name-s2"
    assert (top["rank"], top["tier"], top["region"], top["leaguePoints"]) == (1, "GRANDMASTER", "KR", 900)

    assert client.get("/api/tft/leaderboard", params={"region": "mars"}).status_code == 400


def test_leaderboard_endpoint_errors(repo):
    assert _client(repo).get("/api/tft/leaderboard").status_code == 404

    missing_key = _client(repo, api_key="").get("/api/tft/leaderboard")
    assert missing_key.status_code == 500
    assert missing_key.json() == {"error": "RIOT_API_KEY is not configured"}

    rejected = _client(repo, riot=lambda req: httpx.Response(403)).get("/api/tft/leaderboard/global")
    assert rejected.status_code == 500
    assert "403" in rejected.json()["error"]


def test_global_leaderboard_endpoint(repo):
    def riot(req):
        if req.url.path.endswith("/challenger"):
            lp = 1200 if req.url.host.startswith("kr.") else 800
            return httpx.Response(200, json={"entries": [{"summonerId": "top", "leaguePoints": lp}]})
        return httpx.Response(404)

    response = _client(repo, riot=riot).get("/api/tft/leaderboard/global")
    assert response.status_code == 200
    assert response.json() == {
        "summonerId": "top",
        "puuid": "",
        "summonerName": "Global #1",
        "leaguePoints": 1200,
        "region": "KR",
        "tier": "CHALLENGER",
    }
    assert response.headers["cache-control"] == "s-maxage=300, stale-while-revalidate=600"

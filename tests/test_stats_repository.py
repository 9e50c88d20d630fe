import sqlite3

import pytest

from tft_stats.infrastructure.repositories import SqliteStatsRepository

DAY = 86400


class Clock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return Clock(1_000.0)


@pytest.fixture
def repo(tmp_path, clock):
    repository = SqliteStatsRepository(tmp_path / "db" / "stats.sqlite", clock=clock)
    repository.initialize()
    yield repository
    repository.close()


def _count(repo, table):
    with sqlite3.connect(repo.db_path) as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def test_initialize_is_idempotent(repo):
    repo.initialize()
    assert repo.get_region_statuses() == []


def test_latest_snapshot_wins(repo, clock):
    for version in range(3):
        clock.now += 1
        assert repo.save_stats("units", "EUW", {"region": "EUW", "version": version})
    assert repo.get_stats("units", "EUW") == {"region": "EUW", "version": 2}
    assert repo.get_stats("units", "KR") is None
    assert repo.get_stats("traits", "EUW") is None


def test_non_finite_payload_is_rejected(repo):
    assert repo.save_stats("units", "all", {"winRate": float("nan")}) is False
    assert repo.get_stats("units", "all") is None


def test_matches_are_stored_once_and_filtered_by_region(repo, clock):
    assert repo.save_match("EUW1_1", "EUW", {"id": 1})
    clock.now += 1
    assert repo.save_match("EUW1_1", "EUW", {"id": "dup"})
    assert repo.save_match("KR_1", "KR", {"id": 2})

    assert repo.get_matches() == [{"id": 2}, {"id": 1}]
    assert repo.get_matches("EUW") == [{"id": 1}]
    assert repo.get_matches("all", limit=1) == [{"id": 2}]


def test_error_status_increments_error_count(repo):
    repo.update_region_status("EUW", "processing")
    repo.update_region_status("EUW", "error", "timeout")
    repo.update_region_status("EUW", "error", "boom")
    repo.update_region_status("EUW", "active")

    [status] = repo.get_region_statuses()
    assert status["region"] == "EUW"
    assert status["status"] == "active"
    assert status["error_count"] == 2
    assert status["last_error"] == "boom"


def test_degraded_reason_is_recorded(repo):
    repo.update_region_status("KR", "degraded", "No league data available")
    [status] = repo.get_region_statuses()
    assert (status["status"], status["error_count"], status["last_error"]) == ("degraded", 0, "No league data available")


def test_cleanup_keeps_two_newest_snapshots_and_recent_matches(repo, clock):
    repo.save_match("OLD", "EUW", {"id": "old"})
    for i in range(4):
        clock.now += 1
        repo.save_stats("units", "EUW", {"n": i})
        repo.save_stats("units", "KR", {"n": i})
    repo.save_stats("items", "EUW", {"n": 0})

    clock.now += 10 * DAY
    repo.save_match("NEW", "EUW", {"id": "new"})
    repo.cleanup_old_data(retention_days=7)

    assert repo.get_matches() == [{"id": "new"}]
    assert _count(repo, "stats") == 5
    assert repo.get_stats("units", "EUW") == {"n": 3}
    assert repo.get_stats("items", "EUW") == {"n": 0}

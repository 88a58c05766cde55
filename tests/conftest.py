"""Shared fixtures for store-backed tests."""

import pytest

from story_contest.core.config import ContestConfig, LeaderboardConfig
from story_contest.services.storage import ContestStore


@pytest.fixture
def config(tmp_path):
    return ContestConfig(
        database_path=str(tmp_path / "contest.duckdb"),
        output_dir=str(tmp_path / "reports"),
        leaderboard=LeaderboardConfig(community_pool_size=3),
    )


@pytest.fixture
def store(config):
    contest_store = ContestStore(config)
    yield contest_store
    contest_store.close_sync()

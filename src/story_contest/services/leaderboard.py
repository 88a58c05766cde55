"""Leaderboard service: snapshot, then rank."""

from __future__ import annotations

import structlog

from story_contest.core.config import ContestConfig
from story_contest.ranking import (
    LeaderboardEntry,
    LeaderboardScope,
    RoleFilter,
    community_voting_pool,
    compute_leaderboard,
    select_balanced_top_n,
)
from story_contest.services.storage import ContestSnapshot, ContestStore

logger = structlog.get_logger()


class LeaderboardService:
    """Computes leaderboards from fresh store snapshots.

    Each call takes its own snapshot; there is no caching, retrying or
    coalescing of recomputations. Storage failures surface as
    ``UpstreamUnavailableError``.
    """

    def __init__(self, config: ContestConfig, store: ContestStore) -> None:
        self.config = config
        self.store = store

    def rank_snapshot(
        self,
        snapshot: ContestSnapshot,
        role_filter: RoleFilter | str = RoleFilter.ALL,
        scope: LeaderboardScope | None = None,
    ) -> list[LeaderboardEntry]:
        """Rank an already fetched snapshot."""
        return compute_leaderboard(
            snapshot.votes,
            snapshot.roles,
            snapshot.submissions,
            scope=scope,
            role_filter=role_filter,
            score_range=self.config.scoring.score_range,
        )

    def balance(self, ranked: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        """Apply the configured balanced top-N selection."""
        settings = self.config.leaderboard
        return select_balanced_top_n(
            ranked,
            groups=settings.groups,
            per_group_quota=settings.per_group_quota,
            total_quota=settings.total_quota,
        )

    async def leaderboard(
        self,
        event_id: str | None = None,
        role_filter: RoleFilter | str = RoleFilter.ALL,
    ) -> list[LeaderboardEntry]:
        """Full ranked leaderboard for one event, or all events."""
        active_filter = RoleFilter.parse(role_filter)
        scope = LeaderboardScope.build(event_id=event_id)
        snapshot = await self.store.load_snapshot(event_id)
        entries = self.rank_snapshot(snapshot, active_filter, scope)
        logger.info(
            "leaderboard_computed",
            event_id=event_id,
            role_filter=active_filter.value,
            entries=len(entries),
        )
        return entries

    async def balanced_top(
        self,
        event_id: str | None = None,
        role_filter: RoleFilter | str = RoleFilter.JUDGE_ONLY,
    ) -> list[LeaderboardEntry]:
        """Balanced top-N across the configured groups."""
        return self.balance(await self.leaderboard(event_id, role_filter))

    def _pool_from_snapshot(
        self, snapshot: ContestSnapshot, scope: LeaderboardScope
    ) -> list[str]:
        judge_ranked = self.rank_snapshot(snapshot, RoleFilter.JUDGE_ONLY, scope)
        judge_top = self.balance(judge_ranked)
        return community_voting_pool(
            judge_ranked,
            {e.submission_id for e in judge_top},
            self.config.leaderboard.community_pool_size,
        )

    async def community_pool(self, event_id: str | None = None) -> list[str]:
        """Submission ids eligible for community voting.

        The judges' balanced top-N is removed from the judge ranking and the
        next ``community_pool_size`` entries form the pool.
        """
        scope = LeaderboardScope.build(event_id=event_id)
        snapshot = await self.store.load_snapshot(event_id)
        return self._pool_from_snapshot(snapshot, scope)

    async def community_leaderboard(self, event_id: str | None = None) -> list[LeaderboardEntry]:
        """Community-only ranking restricted to the eligible pool."""
        snapshot = await self.store.load_snapshot(event_id)
        pool = self._pool_from_snapshot(snapshot, LeaderboardScope.build(event_id=event_id))
        scope = LeaderboardScope.build(event_id=event_id, submission_ids=pool)
        return self.rank_snapshot(snapshot, RoleFilter.COMMUNITY_ONLY, scope)

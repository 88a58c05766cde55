"""Ranking module for Story Contest.

Pure leaderboard computation over vote snapshots, plus balanced top-N
selection across submission groups.
"""

from story_contest.ranking.base import (
    LeaderboardEntry,
    LeaderboardScope,
    Role,
    RoleFilter,
    SubmissionRecord,
    VoteRecord,
    round_half_away,
)
from story_contest.ranking.leaderboard import (
    compute_leaderboard,
    latest_votes,
    ranking_key,
    score_from_slider,
    validate_score,
)
from story_contest.ranking.selection import (
    community_voting_pool,
    group_of_submission,
    select_balanced_top_n,
)

__all__ = [
    "LeaderboardEntry",
    "LeaderboardScope",
    "Role",
    "RoleFilter",
    "SubmissionRecord",
    "VoteRecord",
    "community_voting_pool",
    "compute_leaderboard",
    "group_of_submission",
    "latest_votes",
    "ranking_key",
    "round_half_away",
    "score_from_slider",
    "select_balanced_top_n",
    "validate_score",
]

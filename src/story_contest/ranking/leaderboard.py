"""Scored leaderboard computation.

Aggregates raw votes into ranked leaderboard entries. Everything here is a
pure function of its inputs: callers fetch a snapshot of submissions, votes
and roles, then call ``compute_leaderboard``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime

from story_contest.core.errors import InvalidArgumentError
from story_contest.ranking.base import (
    LeaderboardEntry,
    LeaderboardScope,
    Role,
    RoleFilter,
    SubmissionRecord,
    VoteRecord,
    round_half_away,
)

DEFAULT_SCORE_RANGE = (1, 10)


def validate_score(score: object, score_range: tuple[int, int] = DEFAULT_SCORE_RANGE) -> int:
    """Check that a score is an integer within the inclusive bound.

    Raises:
        InvalidArgumentError: If the score is not an int or out of range.
    """
    low, high = score_range
    if isinstance(score, bool) or not isinstance(score, int):
        msg = f"Score must be an integer, got {score!r}"
        raise InvalidArgumentError(msg)
    if not low <= score <= high:
        msg = f"Score {score} outside allowed range {low}-{high}"
        raise InvalidArgumentError(msg)
    return score


def latest_votes(votes: Iterable[VoteRecord]) -> list[VoteRecord]:
    """Collapse votes to one per (voter, submission) pair.

    The latest vote by ``created_at`` wins; equal timestamps fall back to the
    vote id so the result does not depend on input order.
    """
    latest: dict[tuple[str, str], VoteRecord] = {}
    for vote in votes:
        key = (vote.voter_id, vote.submission_id)
        current = latest.get(key)
        if current is None or (vote.created_at, vote.id) > (current.created_at, current.id):
            latest[key] = vote
    return list(latest.values())


def ranking_key(entry: LeaderboardEntry) -> tuple[float, int, datetime, str]:
    """Sort key: mean desc, count desc, earliest submission first, then id."""
    return (-entry.mean, -entry.count, entry.submission.created_at, entry.submission.id)


def compute_leaderboard(
    votes: Iterable[VoteRecord],
    role_of: Mapping[str, Role | str],
    submissions: Iterable[SubmissionRecord],
    scope: LeaderboardScope | None = None,
    role_filter: RoleFilter | str = RoleFilter.ALL,
    score_range: tuple[int, int] = DEFAULT_SCORE_RANGE,
) -> list[LeaderboardEntry]:
    """Rank submissions by mean vote score.

    Args:
        votes: Full vote set; duplicates per (voter, submission) are
            collapsed to the latest vote.
        role_of: Voter id to role. Voters missing from the mapping count as
            community voters.
        submissions: Submission catalog. Votes on unknown submissions are
            ignored.
        scope: Optional restriction to one event or a set of submissions.
        role_filter: "judge-only", "community-only" or "all".
        score_range: Inclusive score bound every vote must satisfy.

    Returns:
        Entries sorted by rounded mean desc, vote count desc, submission
        creation time asc, with positional ranks 1..N. Submissions without
        qualifying votes are left out; the list is empty when none qualify.

    Raises:
        InvalidArgumentError: For an unknown role filter, a malformed scope or
            a vote score outside ``score_range``.
    """
    active_filter = RoleFilter.parse(role_filter)
    if scope is not None and not isinstance(scope, LeaderboardScope):
        msg = f"Malformed scope: {scope!r}"
        raise InvalidArgumentError(msg)

    vote_list = list(votes)
    for vote in vote_list:
        validate_score(vote.score, score_range)

    catalog = {
        s.id: s for s in submissions if scope is None or scope.contains(s)
    }

    totals: dict[str, list[int]] = defaultdict(list)
    for vote in latest_votes(vote_list):
        if vote.submission_id not in catalog:
            continue
        if not active_filter.admits(role_of.get(vote.voter_id)):
            continue
        totals[vote.submission_id].append(vote.score)

    unranked = [
        LeaderboardEntry(
            submission=catalog[submission_id],
            rank=0,
            mean=round_half_away(sum(scores) / len(scores)),
            count=len(scores),
        )
        for submission_id, scores in totals.items()
    ]
    unranked.sort(key=ranking_key)

    return [
        LeaderboardEntry(submission=e.submission, rank=i, mean=e.mean, count=e.count)
        for i, e in enumerate(unranked, 1)
    ]


def score_from_slider(
    percent: float, score_range: tuple[int, int] = DEFAULT_SCORE_RANGE
) -> int:
    """Convert a 0-100 slider position into a vote score.

    The position scales onto 0..max and is clamped up to the minimum score, so
    every slider position yields a score inside ``score_range``.

    Raises:
        InvalidArgumentError: If the percentage is outside 0-100.
    """
    if isinstance(percent, bool) or not 0 <= percent <= 100:
        msg = f"Slider value must be between 0 and 100, got {percent!r}"
        raise InvalidArgumentError(msg)
    low, high = score_range
    return max(low, int(round_half_away(percent / 100 * high, places=0)))

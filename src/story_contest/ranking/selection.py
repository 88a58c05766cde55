"""Balanced top-N selection over a ranked leaderboard."""

from __future__ import annotations

from collections.abc import Callable, Collection, Sequence

from story_contest.core.errors import InvalidArgumentError
from story_contest.ranking.base import LeaderboardEntry
from story_contest.ranking.leaderboard import ranking_key


def group_of_submission(entry: LeaderboardEntry) -> str | None:
    """Default group key: the submission's grouping tag (class level)."""
    return entry.submission.group_key


def select_balanced_top_n(
    ranked: Sequence[LeaderboardEntry],
    group_key_of: Callable[[LeaderboardEntry], str | None] = group_of_submission,
    groups: Sequence[str] = (),
    per_group_quota: int = 2,
    total_quota: int = 6,
) -> list[LeaderboardEntry]:
    """Select a top-N list balanced across named groups.

    Each group, in declared order, contributes up to ``per_group_quota`` of
    its highest-ranked entries. Remaining slots are backfilled from the
    overall ranking. The selection is then re-sorted by the ranking rule and
    truncated to ``total_quota``. With no groups this is a plain top-N.

    Args:
        ranked: Leaderboard entries in rank order.
        group_key_of: Maps an entry to its group name.
        groups: Known groups in their fixed display order.
        per_group_quota: Entries guaranteed per group when available.
        total_quota: Size of the selection.

    Returns:
        Up to ``total_quota`` entries in rank order; fewer when the ranked
        list is shorter.

    Raises:
        InvalidArgumentError: For negative quotas or duplicate group names.
    """
    if per_group_quota < 0 or total_quota < 0:
        msg = f"Quotas must be non-negative (per_group={per_group_quota}, total={total_quota})"
        raise InvalidArgumentError(msg)
    if len(set(groups)) != len(groups):
        msg = f"Duplicate group names: {list(groups)!r}"
        raise InvalidArgumentError(msg)

    ordered = sorted(ranked, key=ranking_key)
    selected: list[LeaderboardEntry] = []
    chosen: set[str] = set()

    for group in groups:
        members = [e for e in ordered if group_key_of(e) == group]
        for entry in members[:per_group_quota]:
            selected.append(entry)
            chosen.add(entry.submission_id)

    for entry in ordered:
        if len(selected) >= total_quota:
            break
        if entry.submission_id not in chosen:
            selected.append(entry)
            chosen.add(entry.submission_id)

    return sorted(selected, key=ranking_key)[:total_quota]


def community_voting_pool(
    judge_ranked: Sequence[LeaderboardEntry],
    excluded: Collection[str],
    pool_size: int = 45,
) -> list[str]:
    """Submission ids eligible for community voting.

    The pool is the next ``pool_size`` entries of the judge ranking once the
    judges' own top selection (``excluded``) is removed.
    """
    if pool_size < 0:
        msg = f"Pool size must be non-negative, got {pool_size}"
        raise InvalidArgumentError(msg)
    excluded_ids = set(excluded)
    remaining = [e.submission_id for e in judge_ranked if e.submission_id not in excluded_ids]
    return remaining[:pool_size]

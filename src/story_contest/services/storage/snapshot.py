"""Immutable read snapshot handed to the ranking engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from story_contest.ranking import Role, SubmissionRecord, VoteRecord


@dataclass(frozen=True)
class ContestSnapshot:
    """Submissions, votes and voter roles fetched together before ranking.

    Attributes:
        submissions: Submission catalog for the requested event (or all).
        votes: Votes on those submissions.
        roles: Role of every voter that has an assignment.
        event_id: Event the snapshot was taken for, None for all events.
    """

    submissions: tuple[SubmissionRecord, ...] = ()
    votes: tuple[VoteRecord, ...] = ()
    roles: dict[str, Role] = field(default_factory=dict)
    event_id: str | None = None

    @property
    def voter_ids(self) -> set[str]:
        return {v.voter_id for v in self.votes}

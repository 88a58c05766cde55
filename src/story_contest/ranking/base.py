"""Domain records and value types shared by the ranking engine."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from story_contest.core.errors import InvalidArgumentError


class Role(str, Enum):
    """Closed set of actor roles."""

    PARTICIPANT = "participant"
    JUDGE = "judge"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Role | str) -> Role:
        try:
            return cls(value)
        except ValueError as e:
            msg = f"Unknown role: {value!r}"
            raise InvalidArgumentError(msg) from e


class RoleFilter(str, Enum):
    """Which voter population contributes to an aggregate.

    JUDGE_ONLY keeps votes cast by judges. COMMUNITY_ONLY keeps exactly the
    complement: participants, admins and voters without a role assignment.
    """

    JUDGE_ONLY = "judge-only"
    COMMUNITY_ONLY = "community-only"
    ALL = "all"

    @classmethod
    def parse(cls, value: RoleFilter | str) -> RoleFilter:
        """Parse a role filter.

        Raises:
            InvalidArgumentError: If the value is not a recognized filter.
        """
        try:
            return cls(value)
        except ValueError as e:
            allowed = ", ".join(f.value for f in cls)
            msg = f"Unknown role filter {value!r}; expected one of: {allowed}"
            raise InvalidArgumentError(msg) from e

    def admits(self, role: Role | str | None) -> bool:
        if self is RoleFilter.ALL:
            return True
        is_judge = role == Role.JUDGE
        return is_judge if self is RoleFilter.JUDGE_ONLY else not is_judge


@dataclass(frozen=True)
class SubmissionRecord:
    """A single contest entry.

    Attributes:
        id: Opaque submission identifier.
        created_at: Creation timestamp; earlier entries win ranking ties.
        event_id: Event the entry was registered for.
        group_key: Grouping tag such as a class level, None when ungrouped.
        owner_id: Participant who owns the entry.
        category: Free-form contest category.
        title: Story title.
    """

    id: str
    created_at: datetime
    event_id: str | None = None
    group_key: str | None = None
    owner_id: str | None = None
    category: str | None = None
    title: str = ""


@dataclass(frozen=True)
class VoteRecord:
    """A scored judgment by one voter on one submission."""

    id: str
    submission_id: str
    voter_id: str
    score: int
    created_at: datetime


@dataclass(frozen=True)
class LeaderboardScope:
    """Optional restriction of the ranked submissions.

    Attributes:
        event_id: Only rank submissions of this event.
        submission_ids: Only rank these submissions.
    """

    event_id: str | None = None
    submission_ids: frozenset[str] | None = None

    @classmethod
    def build(
        cls,
        event_id: str | None = None,
        submission_ids: Collection[str] | None = None,
    ) -> LeaderboardScope:
        """Build a validated scope.

        Raises:
            InvalidArgumentError: For a blank event id or an id collection
                that is a bare string.
        """
        if event_id is not None and (not isinstance(event_id, str) or not event_id.strip()):
            msg = f"Malformed scope event id: {event_id!r}"
            raise InvalidArgumentError(msg)
        ids = None
        if submission_ids is not None:
            if isinstance(submission_ids, str):
                msg = "Scope submission ids must be a collection, not a string"
                raise InvalidArgumentError(msg)
            ids = frozenset(submission_ids)
        return cls(event_id=event_id, submission_ids=ids)

    def contains(self, submission: SubmissionRecord) -> bool:
        if self.event_id is not None and submission.event_id != self.event_id:
            return False
        return self.submission_ids is None or submission.id in self.submission_ids


@dataclass(frozen=True)
class LeaderboardEntry:
    """One ranked row of a leaderboard.

    Attributes:
        submission: The ranked submission.
        rank: Positional rank, starting at 1.
        mean: Mean score rounded to one decimal.
        count: Number of qualifying votes.
    """

    submission: SubmissionRecord
    rank: int
    mean: float
    count: int

    @property
    def submission_id(self) -> str:
        return self.submission.id


def round_half_away(value: float, places: int = 1) -> float:
    """Round to ``places`` decimals, halves away from zero.

    The float is rounded through its shortest decimal repr so that values
    such as 7.25 round to 7.3 rather than following binary representation.
    """
    quantum = Decimal(1).scaleb(-places)
    magnitude = Decimal(repr(abs(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(magnitude if value >= 0 else -magnitude)

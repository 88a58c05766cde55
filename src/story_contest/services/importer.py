"""Bulk import of submissions, roles and votes from YAML."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field

from story_contest.models import Submission, as_utc
from story_contest.ranking import Role
from story_contest.services.storage import ContestStore
from story_contest.services.voting import VoteService

logger = structlog.get_logger()


class SubmissionData(BaseModel):
    id: str
    event_id: str | None = None
    owner_id: str | None = None
    category: str | None = None
    group_key: str | None = None
    title: str = ""
    created_at: datetime | None = None


class RoleData(BaseModel):
    actor_id: str
    role: Role


class VoteData(BaseModel):
    voter_id: str
    submission_id: str
    score: int


class ContestData(BaseModel):
    """Seed data file contents.

    Votes are applied in file order, so a later vote by the same voter on the
    same submission replaces the earlier one.
    """

    submissions: list[SubmissionData] = Field(default_factory=list)
    roles: list[RoleData] = Field(default_factory=list)
    votes: list[VoteData] = Field(default_factory=list)


def load_contest_data(path: str | Path) -> ContestData:
    """Load and validate a seed data YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    data_path = Path(path)
    if not data_path.exists():
        msg = f"Data file not found: {data_path}"
        raise FileNotFoundError(msg)

    with data_path.open() as f:
        raw = yaml.safe_load(f)

    return ContestData.model_validate(raw or {})


async def import_contest_data(
    data: ContestData, store: ContestStore, votes: VoteService
) -> dict[str, int]:
    """Write seed data through the repositories and the vote boundary.

    Returns:
        Number of imported submissions, roles and votes.
    """
    for item in data.submissions:
        fields = item.model_dump(exclude_none=True)
        if item.created_at is not None:
            fields["created_at"] = as_utc(item.created_at)
        await store.submissions.save_submission(Submission(**fields))

    for item in data.roles:
        await store.roles.assign_role(item.actor_id, item.role)

    for item in data.votes:
        await votes.cast_vote(item.voter_id, item.submission_id, item.score)

    counts = {
        "submissions": len(data.submissions),
        "roles": len(data.roles),
        "votes": len(data.votes),
    }
    logger.info("contest_data_imported", **counts)
    return counts

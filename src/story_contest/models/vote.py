"""Vote table with one row per (voter, submission)."""

import uuid
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from ._time import utc_now


class Vote(SQLModel, table=True):
    """A score given by one voter to one submission."""

    __table_args__ = (
        UniqueConstraint("voter_id", "submission_id", name="uq_vote_voter_submission"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    submission_id: str = Field(index=True)
    voter_id: str = Field(index=True)
    score: int
    created_at: datetime = Field(default_factory=utc_now)

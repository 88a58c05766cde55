"""Contest submission table."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from ._time import utc_now


class Submission(SQLModel, table=True):
    """A contest entry registered by a participant for an event."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    event_id: str | None = Field(default=None, index=True)
    owner_id: str | None = None
    category: str | None = None
    group_key: str | None = None  # class level for school events
    title: str = ""
    created_at: datetime = Field(default_factory=utc_now)

"""Outstanding one-time password codes."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from ._time import utc_now


class OtpCode(SQLModel, table=True):
    """A single-use verification code sent to a phone number."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    phone: str = Field(index=True)
    code: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)

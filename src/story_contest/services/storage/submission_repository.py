"""Database persistence for contest submissions."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from story_contest.models import Submission, as_utc
from story_contest.ranking import SubmissionRecord

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


def to_submission_record(row: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        created_at=as_utc(row.created_at),
        event_id=row.event_id,
        group_key=row.group_key,
        owner_id=row.owner_id,
        category=row.category,
        title=row.title,
    )


class SubmissionRepository(AsyncRepository):
    """Persist and query submissions."""

    def __init__(self, engine: Engine, lock: threading.Lock | None = None) -> None:
        super().__init__(engine, lock)

    async def save_submission(self, submission: Submission) -> SubmissionRecord:
        """Insert a submission, or apply an administrative correction to it."""

        def _save(session: Session) -> SubmissionRecord:
            existing = session.get(Submission, submission.id)
            if existing:
                for key, value in submission.model_dump(exclude_unset=True).items():
                    setattr(existing, key, value)
                row = existing
            else:
                row = submission
            session.add(row)
            session.commit()
            session.refresh(row)
            return to_submission_record(row)

        record = await self._run_session(_save)
        logger.debug("submission_saved", submission_id=record.id, event_id=record.event_id)
        return record

    async def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        def _get(session: Session) -> SubmissionRecord | None:
            row = session.get(Submission, submission_id)
            return to_submission_record(row) if row else None

        return await self._run_session(_get)

    async def list_submissions(self, event_id: str | None = None) -> list[SubmissionRecord]:
        """List submissions, optionally for one event, oldest first."""

        def _get(session: Session) -> list[SubmissionRecord]:
            statement = select(Submission)
            if event_id is not None:
                statement = statement.where(Submission.event_id == event_id)
            statement = statement.order_by(col(Submission.created_at), col(Submission.id))
            return [to_submission_record(row) for row in session.exec(statement).all()]

        return await self._run_session(_get)

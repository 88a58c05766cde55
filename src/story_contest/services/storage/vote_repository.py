"""Database persistence for votes with upsert by (voter, submission)."""

from __future__ import annotations

import threading
from collections.abc import Collection
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from story_contest.models import Vote, as_utc, utc_now
from story_contest.ranking import VoteRecord

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


def to_vote_record(row: Vote) -> VoteRecord:
    return VoteRecord(
        id=row.id,
        submission_id=row.submission_id,
        voter_id=row.voter_id,
        score=row.score,
        created_at=as_utc(row.created_at),
    )


class VoteRepository(AsyncRepository):
    """Persist and query votes."""

    def __init__(self, engine: Engine, lock: threading.Lock | None = None) -> None:
        super().__init__(engine, lock)

    async def upsert_vote(self, voter_id: str, submission_id: str, score: int) -> VoteRecord:
        """Save a vote, replacing the voter's earlier score for the submission."""

        def _save(session: Session) -> VoteRecord:
            statement = select(Vote).where(
                Vote.voter_id == voter_id,
                Vote.submission_id == submission_id,
            )
            existing = session.exec(statement).first()
            if existing:
                existing.score = score
                existing.created_at = utc_now()
                row = existing
            else:
                row = Vote(voter_id=voter_id, submission_id=submission_id, score=score)
            session.add(row)
            session.commit()
            session.refresh(row)
            return to_vote_record(row)

        record = await self._run_session(_save)
        logger.info(
            "vote_upserted",
            voter_id=voter_id,
            submission_id=submission_id,
            score=score,
        )
        return record

    async def list_votes(self, submission_ids: Collection[str] | None = None) -> list[VoteRecord]:
        """List votes, optionally restricted to some submissions."""

        def _get(session: Session) -> list[VoteRecord]:
            statement = select(Vote)
            if submission_ids is not None:
                if not submission_ids:
                    return []
                statement = statement.where(col(Vote.submission_id).in_(list(submission_ids)))
            return [to_vote_record(row) for row in session.exec(statement).all()]

        return await self._run_session(_get)

    async def votes_by_voter(self, voter_id: str) -> list[VoteRecord]:
        """Votes already cast by one voter (used to hide judged entries)."""

        def _get(session: Session) -> list[VoteRecord]:
            statement = select(Vote).where(Vote.voter_id == voter_id)
            return [to_vote_record(row) for row in session.exec(statement).all()]

        return await self._run_session(_get)

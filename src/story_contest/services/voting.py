"""Vote write boundary: validate, then upsert."""

from __future__ import annotations

import structlog

from story_contest.core.config import ContestConfig
from story_contest.core.errors import InvalidArgumentError
from story_contest.ranking import VoteRecord, score_from_slider, validate_score
from story_contest.services.storage import ContestStore

logger = structlog.get_logger()


class VoteService:
    """Accepts votes from judges and community voters."""

    def __init__(self, config: ContestConfig, store: ContestStore) -> None:
        self.config = config
        self.store = store

    async def cast_vote(self, voter_id: str, submission_id: str, score: int) -> VoteRecord:
        """Record a vote; a repeat vote replaces the voter's earlier score.

        Raises:
            InvalidArgumentError: For an out-of-range score, a blank voter id
                or an unknown submission.
        """
        validate_score(score, self.config.scoring.score_range)
        if not voter_id or not voter_id.strip():
            msg = "Voter id cannot be empty"
            raise InvalidArgumentError(msg)

        submission = await self.store.submissions.get_submission(submission_id)
        if submission is None:
            logger.warning("vote_rejected_unknown_submission", submission_id=submission_id)
            msg = f"Unknown submission: {submission_id!r}"
            raise InvalidArgumentError(msg)

        return await self.store.votes.upsert_vote(voter_id, submission_id, score)

    async def cast_slider_vote(
        self, voter_id: str, submission_id: str, percent: float
    ) -> VoteRecord:
        """Record a vote given as a 0-100 slider position."""
        score = score_from_slider(percent, self.config.scoring.score_range)
        return await self.cast_vote(voter_id, submission_id, score)

    async def pending_submissions(self, voter_id: str, event_id: str | None = None) -> list[str]:
        """Submission ids the voter has not scored yet."""
        voted = {v.submission_id for v in await self.store.votes.votes_by_voter(voter_id)}
        submissions = await self.store.submissions.list_submissions(event_id)
        return [s.id for s in submissions if s.id not in voted]

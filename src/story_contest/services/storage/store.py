"""Contest storage: DuckDB engine, repositories and read snapshots."""

from __future__ import annotations

import gc
import threading
from pathlib import Path

import structlog
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from story_contest.core.config import ContestConfig

from .otp_repository import OtpRepository
from .role_repository import RoleRepository
from .snapshot import ContestSnapshot
from .submission_repository import SubmissionRepository
from .vote_repository import VoteRepository

logger = structlog.get_logger()


class ContestStore:
    """Unified persistence layer for contest data.

    Handles:
    - SQLModel tables for submissions, votes, roles and OTP codes (DuckDB)
    - Fetch-then-compute snapshots for leaderboard computation
    """

    def __init__(self, config: ContestConfig) -> None:
        """Initialize contest store.

        Args:
            config: Contest configuration (``database_path`` is used).
        """
        self.config = config
        self._db_path = Path(config.database_path)
        self._engine = None
        self._init_db()

        # one lock per database file, shared by every repository
        self._lock = threading.Lock()
        self.submissions = SubmissionRepository(self._engine, self._lock)
        self.votes = VoteRepository(self._engine, self._lock)
        self.roles = RoleRepository(self._engine, self._lock)
        self.otp_codes = OtpRepository(self._engine, self._lock)

    def _init_db(self) -> None:
        """Initialize DuckDB database and create tables."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db_url = f"duckdb:///{self._db_path}"
        # Use NullPool to avoid connection pooling issues on Windows
        self._engine = create_engine(db_url, poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)
        logger.info("store_init", path=str(self._db_path))

    async def load_snapshot(self, event_id: str | None = None) -> ContestSnapshot:
        """Fetch submissions, their votes and the voters' roles.

        Roles are fetched with one batched query over the distinct voters.

        Raises:
            UpstreamUnavailableError: If any of the reads fails.
        """
        submissions = await self.submissions.list_submissions(event_id)
        if event_id is None:
            votes = await self.votes.list_votes()
        else:
            votes = await self.votes.list_votes({s.id for s in submissions})
        roles = await self.roles.roles_for({v.voter_id for v in votes})

        logger.debug(
            "snapshot_loaded",
            event_id=event_id,
            submissions=len(submissions),
            votes=len(votes),
            roles=len(roles),
        )
        return ContestSnapshot(
            submissions=tuple(submissions),
            votes=tuple(votes),
            roles=roles,
            event_id=event_id,
        )

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()

    def close_sync(self) -> None:
        """Synchronously dispose of the database engine."""
        if self._engine:
            self._engine.dispose()
            self._engine = None

        gc.collect()

"""Shared async repository helpers for SQLModel session work."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import duckdb
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from story_contest.core.errors import UpstreamUnavailableError

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")

logger = structlog.get_logger()


class AsyncRepository:
    """Wrap sync SQLModel session work for async callers.

    DuckDB allows one open handle per database file, so repositories sharing
    an engine must share ``lock`` and run their sessions one at a time.
    """

    def __init__(self, engine: Engine, lock: threading.Lock | None = None) -> None:
        self._engine = engine
        self._lock = lock or threading.Lock()

    async def _run_session(self, fn: Callable[[Session], T]) -> T:
        """Run a sync function inside a Session on a worker thread.

        Raises:
            UpstreamUnavailableError: If the database fails to respond.
        """

        def _run() -> T:
            with self._lock, Session(self._engine) as session:
                return fn(session)

        try:
            return await asyncio.to_thread(_run)
        except (SQLAlchemyError, duckdb.Error) as e:
            logger.error("database_unavailable", repository=type(self).__name__, error=str(e))
            msg = f"Database request failed in {type(self).__name__}: {e}"
            raise UpstreamUnavailableError(msg) from e

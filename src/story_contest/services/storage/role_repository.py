"""Database persistence for role assignments."""

from __future__ import annotations

import threading
from collections.abc import Collection
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from story_contest.models import RoleAssignment
from story_contest.ranking import Role

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class RoleRepository(AsyncRepository):
    """Persist and query the single active role of each actor."""

    def __init__(self, engine: Engine, lock: threading.Lock | None = None) -> None:
        super().__init__(engine, lock)

    async def assign_role(self, actor_id: str, role: Role | str) -> Role:
        """Set an actor's role, replacing any previous one."""
        parsed = Role.parse(role)

        def _save(session: Session) -> None:
            existing = session.get(RoleAssignment, actor_id)
            if existing:
                existing.role = parsed.value
                session.add(existing)
            else:
                session.add(RoleAssignment(actor_id=actor_id, role=parsed.value))
            session.commit()

        await self._run_session(_save)
        logger.info("role_assigned", actor_id=actor_id, role=parsed.value)
        return parsed

    async def roles_for(self, actor_ids: Collection[str]) -> dict[str, Role]:
        """Look up roles for many actors in a single query.

        Actors without an assignment are absent from the result.
        """
        if not actor_ids:
            return {}

        def _get(session: Session) -> dict[str, Role]:
            statement = select(RoleAssignment).where(
                col(RoleAssignment.actor_id).in_(list(actor_ids))
            )
            return {row.actor_id: Role(row.role) for row in session.exec(statement).all()}

        return await self._run_session(_get)

"""Database persistence for one-time password codes."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import TYPE_CHECKING

from sqlmodel import Session, col, select

from story_contest.models import OtpCode

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class OtpRepository(AsyncRepository):
    """Persist outstanding codes; at most one per phone number."""

    def __init__(self, engine: Engine, lock: threading.Lock | None = None) -> None:
        super().__init__(engine, lock)

    async def replace_code(self, phone: str, code: str, expires_at: datetime) -> OtpCode:
        """Store a new code, invalidating any outstanding code for the phone."""

        def _save(session: Session) -> OtpCode:
            for old in session.exec(select(OtpCode).where(OtpCode.phone == phone)).all():
                session.delete(old)
            row = OtpCode(phone=phone, code=code, expires_at=expires_at)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

        return await self._run_session(_save)

    async def latest_code(self, phone: str) -> OtpCode | None:
        def _get(session: Session) -> OtpCode | None:
            statement = (
                select(OtpCode)
                .where(OtpCode.phone == phone)
                .order_by(col(OtpCode.created_at).desc())
                .limit(1)
            )
            return session.exec(statement).first()

        return await self._run_session(_get)

    async def delete_code(self, code_id: str) -> bool:
        """Delete a code; False when it was already gone."""

        def _delete(session: Session) -> bool:
            row = session.get(OtpCode, code_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

        return await self._run_session(_delete)

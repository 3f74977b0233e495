"""Session repository."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from authstore.core.db import dialect_insert
from authstore.models import Session


class SessionRepository:
    """Repository for sessions shared by the tokens of one grant."""

    def __init__(self, db: AsyncSession):
        """Constructor."""
        self.db = db

    async def upsert(self, row: dict[str, Any]) -> None:
        """Insert a session, or overwrite every field of the one with its id."""
        stmt = dialect_insert(self.db, Session).values(**row)
        changed = {c: stmt.excluded[c] for c in row if c != "id"}
        changed["updated_at"] = func.now()
        await self.db.execute(
            stmt.on_conflict_do_update(index_elements=["id"], set_=changed)
        )

    async def get_by_id(self, session_id: str) -> Session | None:
        """Fetch a session with its user."""
        stmt = (
            select(Session)
            .options(joinedload(Session.user))
            .where(Session.id == session_id, Session.deleted_at.is_(None))
        )
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

"""User repository."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from authstore.core.db import dialect_insert
from authstore.models import User


class UserRepository:
    """Repository for users."""

    def __init__(self, db: AsyncSession):
        """Constructor."""
        self.db = db

    async def get_by_username(self, username: str) -> User | None:
        """Fetch a user by username."""
        stmt = select(User).where(User.username == username, User.deleted_at.is_(None))
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def upsert(self, row: dict[str, Any]) -> None:
        """Insert a user or overwrite the one with the same username.

        The id of an existing user is kept.
        """
        stmt = dialect_insert(self.db, User).values(**row)
        changed = {c: stmt.excluded[c] for c in row if c not in ("id", "username")}
        changed["updated_at"] = func.now()
        await self.db.execute(
            stmt.on_conflict_do_update(index_elements=["username"], set_=changed)
        )

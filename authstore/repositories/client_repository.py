"""Client repository."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from authstore.core.db import dialect_insert
from authstore.models import Client


class ClientRepository:
    """Repository for registered clients."""

    def __init__(self, db: AsyncSession):
        """Constructor."""
        self.db = db

    async def get_by_id(self, client_id: str) -> Client | None:
        """Fetch a client by primary key."""
        stmt = select(Client).where(Client.id == client_id, Client.deleted_at.is_(None))
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def upsert(self, row: dict[str, Any]) -> None:
        """Insert a client or overwrite the one with the same id."""
        stmt = dialect_insert(self.db, Client).values(**row)
        changed = {c: stmt.excluded[c] for c in row if c != "id"}
        changed["updated_at"] = func.now()
        await self.db.execute(
            stmt.on_conflict_do_update(index_elements=["id"], set_=changed)
        )

"""Client assertion JTI repository."""

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from authstore.core.db import dialect_insert
from authstore.models import ClientAssertionReplay


class JtiRepository:
    """Repository for client assertion JTIs."""

    def __init__(self, db: AsyncSession):
        """Constructor."""
        self.db = db

    async def get_live(self, jti: str, now: datetime) -> ClientAssertionReplay | None:
        """Fetch the record for `jti` if it has not expired."""
        stmt = select(ClientAssertionReplay).where(
            ClientAssertionReplay.jti == jti, ClientAssertionReplay.expires_at > now
        )
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def record(self, jti: str, expires_at: datetime, now: datetime) -> bool:
        """Record `jti` unless a live record exists.

        An expired record for the same jti is overwritten in the same
        statement. Returns False when a live record blocked the write.
        """
        stmt = dialect_insert(self.db, ClientAssertionReplay).values(
            id=str(uuid.uuid4()), jti=jti, expires_at=expires_at
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["jti"],
            set_={"id": stmt.excluded.id, "expires_at": stmt.excluded.expires_at},
            where=ClientAssertionReplay.expires_at <= now,
        ).returning(ClientAssertionReplay.jti)
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none() is not None

    async def delete_expired(self, now: datetime) -> int:
        """Delete every expired record."""
        stmt = (
            delete(ClientAssertionReplay)
            .where(ClientAssertionReplay.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        res = await self.db.execute(stmt)
        return res.rowcount

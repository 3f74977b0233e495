"""Token repositories: one per request-bearing token table."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from authstore.core.db import dialect_insert
from authstore.models import (
    AccessToken,
    AuthorizationCode,
    PKCERequest,
    RefreshToken,
    Session,
)

TokenT = TypeVar("TokenT", AuthorizationCode, AccessToken, RefreshToken, PKCERequest)


class TokenRepository(Generic[TokenT]):
    """Point lookups and state changes for a token table."""

    model: type[TokenT]
    key_name: str = "signature"

    def __init__(self, db: AsyncSession):
        """Constructor."""
        self.db = db

    @property
    def key_column(self):
        """Column holding the lookup key."""
        return getattr(self.model, self.key_name)

    def _load_related(self, stmt):
        """Eager load client, session and session user."""
        return stmt.options(
            joinedload(self.model.client),
            joinedload(self.model.session).joinedload(Session.user),
        )

    async def get_by_key(self, key: str) -> TokenT | None:
        """Fetch a row by code/signature with client, session and user loaded."""
        stmt = self._load_related(
            select(self.model).where(
                self.key_column == key, self.model.deleted_at.is_(None)
            )
        )
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def get_id_by_key(self, key: str) -> str | None:
        """Return the request id of the row holding `key`."""
        stmt = select(self.model.id).where(
            self.key_column == key, self.model.deleted_at.is_(None)
        )
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none()

    async def create(self, key: str, values: dict[str, Any]) -> None:
        """Insert a row; a duplicate id or key raises `IntegrityError`."""
        await self.db.execute(
            insert(self.model).values(**values, **{self.key_name: key})
        )

    async def create_or_replace_inactive(self, key: str, values: dict[str, Any]) -> bool:
        """Insert a row, or replace a row with the same id that is inactive.

        Returns False when an active row already holds the id. A duplicate
        key still raises `IntegrityError`.
        """
        row = {**values, self.key_name: key}
        stmt = dialect_insert(self.db, self.model).values(**row)
        replaced = {c: stmt.excluded[c] for c in row if c != "id"}
        replaced["created_at"] = func.now()
        replaced["updated_at"] = None
        replaced["deleted_at"] = None
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_=replaced,
            where=self.model.active.is_(False),
        ).returning(self.model.id)
        res = await self.db.execute(stmt)
        return res.scalar_one_or_none() is not None

    async def set_inactive(self, request_id: str) -> bool:
        """Mark the row with primary id `request_id` inactive."""
        stmt = (
            update(self.model)
            .where(self.model.id == request_id, self.model.deleted_at.is_(None))
            .values(active=False, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        res = await self.db.execute(stmt)
        return res.rowcount > 0

    async def delete_by_key(self, key: str) -> bool:
        """Hard-delete the row holding `key`."""
        stmt = (
            delete(self.model)
            .where(self.key_column == key)
            .execution_options(synchronize_session=False)
        )
        res = await self.db.execute(stmt)
        return res.rowcount > 0


class AuthorizationCodeRepository(TokenRepository[AuthorizationCode]):
    """Repository for authorization codes, keyed by code."""

    model = AuthorizationCode
    key_name = "code"


class AccessTokenRepository(TokenRepository[AccessToken]):
    """Repository for access tokens, keyed by signature."""

    model = AccessToken


class RefreshTokenRepository(TokenRepository[RefreshToken]):
    """Repository for refresh tokens, keyed by signature."""

    model = RefreshToken


class PKCERepository(TokenRepository[PKCERequest]):
    """Repository for PKCE requests, keyed by signature."""

    model = PKCERequest

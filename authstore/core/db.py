"""Database engine and session lifecycle."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authstore.config import settings
from authstore.core.logging import get_logger
from authstore.models import Base

logger = get_logger(__name__)

SUPPORTED_DIALECTS = ("postgresql", "sqlite")


class DatabaseSessionManager:
    """Owns the async engine; opened at startup and closed at shutdown."""

    def __init__(self, url: str | None = None, *, echo: bool | None = None):
        """Constructor."""
        self.url = url or settings.DB_URL
        self.echo = settings.DB_ECHO if echo is None else echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        """Whether `open` has been called without a matching `close`."""
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        """Return the engine, failing if the manager is closed."""
        if self._engine is None:
            raise RuntimeError("DatabaseSessionManager is not open")
        return self._engine

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect, e.g. `sqlite` or `postgresql`."""
        return self.engine.dialect.name

    def open(self) -> None:
        """Create the engine and session factory."""
        if self._engine is not None:
            return
        backend = make_url(self.url).get_backend_name()
        if backend not in SUPPORTED_DIALECTS:
            raise ValueError(f"unsupported dialect: {backend}")
        kwargs: dict = {"echo": self.echo, "pool_pre_ping": True}
        if backend != "sqlite":
            kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
        self._engine = create_async_engine(self.url, **kwargs)
        self._sessionmaker = async_sessionmaker(
            self._engine, expire_on_commit=False, autoflush=False
        )
        logger.info("db_opened", backend=backend)

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("db_closed")

    async def create_all(self) -> None:
        """Create every table that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        """Drop every table."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; uncommitted work is rolled back on exit."""
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseSessionManager is not open")
        async with self._sessionmaker() as sess:
            yield sess


def make_session_dependency(
    manager: DatabaseSessionManager,
) -> Callable[[], AsyncIterator[AsyncSession]]:
    """Build a per-request session provider bound to `manager`."""

    async def get_db_session() -> AsyncIterator[AsyncSession]:
        """Yield one session."""
        async with manager.session() as sess:
            yield sess

    return get_db_session


def dialect_insert(sess: AsyncSession, model):
    """Return an `INSERT` supporting `ON CONFLICT` for the session's dialect."""
    name = sess.bind.dialect.name
    if name == "postgresql":
        return pg_insert(model)
    if name == "sqlite":
        return sqlite_insert(model)
    raise ValueError(f"unsupported dialect: {name}")

"""
Shared pytest fixtures.

Every test gets its own SQLite database file seeded with the demo
registry (`client-one`, `client-two`, user `ovl_doe`).
"""

import os
import uuid

import pytest

# Cheap hashing for tests; must be set before authstore reads its settings.
os.environ.setdefault("AUTHSTORE_PBKDF2_ITERATIONS", "1000")
os.environ.setdefault("AUTHSTORE_LOG_JSON", "false")

from authstore.core.db import DatabaseSessionManager  # noqa: E402
from authstore.core.logging import setup_structlog_json  # noqa: E402
from authstore.schemas.request import TokenRequest  # noqa: E402
from authstore.schemas.session import OAuthSession  # noqa: E402
from authstore.services.seed_service import seed_registry  # noqa: E402
from authstore.storage import Storage  # noqa: E402

setup_structlog_json(level="WARNING")

SCOPES = ["fosite", "photos", "offline"]
AUDIENCE = ["https://api.example.com"]


@pytest.fixture
async def db_manager(tmp_path):
    """Open database with the schema created."""
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")
    manager.open()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
async def storage(db_manager):
    """Storage over a seeded registry."""
    await seed_registry(db_manager)
    return Storage(db_manager)


@pytest.fixture
async def client(storage):
    return await storage.get_client("client-one")


@pytest.fixture
async def user(storage):
    return await storage.get_user("ovl_doe")


@pytest.fixture
def make_session(client, user):
    """Factory for fresh sessions of the demo user on `client-one`."""

    def _make(**extra) -> OAuthSession:
        return OAuthSession.new(
            client.id,
            user.id,
            user.username,
            user.name,
            extra={"user_id": user.id, **extra},
        )

    return _make


@pytest.fixture
def make_request(client, make_session):
    """Factory for token requests carrying a fresh session."""

    def _make(
        request_id: str | None = None,
        scopes: list[str] | None = None,
        session: OAuthSession | None = None,
    ) -> TokenRequest:
        scopes = SCOPES if scopes is None else scopes
        return TokenRequest(
            id=request_id or str(uuid.uuid4()),
            client=client,
            requested_scopes=list(scopes),
            granted_scopes=list(scopes),
            requested_audience=list(AUDIENCE),
            granted_audience=list(AUDIENCE),
            form={
                "redirect_uri": ["http://localhost:8080/callback"],
                "state": ["some;state"],
            },
            session=session or make_session(),
        )

    return _make

"""Storage used by the OAuth2 protocol engine."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from authstore.core.db import DatabaseSessionManager
from authstore.core.logging import get_logger
from authstore.errors import NotFoundError, translate_db_errors
from authstore.repositories.token_repository import (
    AccessTokenRepository,
    RefreshTokenRepository,
)
from authstore.schemas.client import ClientInfo
from authstore.schemas.request import TokenRequest
from authstore.schemas.user import UserInfo
from authstore.services.client_service import ClientRegistry
from authstore.services.credential_service import CredentialVerifier
from authstore.services.replay_guard import JtiPruner, ReplayGuard
from authstore.services.seed_service import seed_registry
from authstore.services.token_store import (
    AccessTokenStore,
    AuthorizeCodeStore,
    PKCEStore,
    RefreshTokenStore,
)

logger = get_logger(__name__)


class Storage:
    """Persistence for the authorize, token, introspect and revoke flows."""

    def __init__(self, db_manager: DatabaseSessionManager):
        """Constructor."""
        self.db_manager = db_manager
        self.clients = ClientRegistry(db_manager)
        self.replay_guard = ReplayGuard(db_manager)
        self.credentials = CredentialVerifier(db_manager)
        self.authorize_codes = AuthorizeCodeStore(db_manager)
        self.access_tokens = AccessTokenStore(db_manager)
        self.refresh_tokens = RefreshTokenStore(db_manager)
        self.pkce_requests = PKCEStore(db_manager)

    # Clients and client assertions

    async def get_client(self, client_id: str) -> ClientInfo:
        """Load a registered client by id."""
        return await self.clients.get_client(client_id)

    async def client_assertion_jwt_valid(self, jti: str) -> None:
        """Raise `ReplayDetectedError` if the JTI is known."""
        await self.replay_guard.check_jti(jti)

    async def set_client_assertion_jwt(self, jti: str, expires_at: datetime) -> None:
        """Mark a JTI as known until `expires_at`."""
        await self.replay_guard.check_and_record_jti(jti, expires_at)

    # Resource owners

    async def authenticate(self, username: str, secret: str) -> None:
        """Check a resource owner password."""
        await self.credentials.authenticate(username, secret)

    async def get_user(self, username: str) -> UserInfo:
        """Load a resource owner by username."""
        return await self.credentials.get_user(username)

    # Authorization codes

    async def create_authorize_code_session(
        self, code: str, request: TokenRequest
    ) -> None:
        """Store an authorization code with its request."""
        await self.authorize_codes.create_session(code, request)

    async def get_authorize_code_session(self, code: str) -> TokenRequest:
        """Return the request; raises `InvalidatedCodeError` once consumed."""
        return await self.authorize_codes.get_session(code)

    async def invalidate_authorize_code_session(self, code: str) -> None:
        """Mark an authorization code as used."""
        await self.authorize_codes.invalidate_code(code)

    # Access tokens

    async def create_access_token_session(
        self, signature: str, request: TokenRequest
    ) -> None:
        """Store an access token signature with its request."""
        await self.access_tokens.create_session(signature, request)

    async def get_access_token_session(self, signature: str) -> TokenRequest:
        """Return the request behind an access token signature."""
        return await self.access_tokens.get_session(signature)

    async def delete_access_token_session(self, signature: str) -> None:
        """Delete the access token holding `signature`."""
        await self.access_tokens.delete(signature)

    async def revoke_access_token(self, request_id: str) -> None:
        """Revoke the access token issued for `request_id`."""
        await self.access_tokens.revoke(request_id)

    # Refresh tokens

    async def create_refresh_token_session(
        self, signature: str, request: TokenRequest
    ) -> None:
        """Store a refresh token signature with its request."""
        await self.refresh_tokens.create_session(signature, request)

    async def get_refresh_token_session(self, signature: str) -> TokenRequest:
        """Return the request behind a refresh token signature."""
        return await self.refresh_tokens.get_session(signature)

    async def delete_refresh_token_session(self, signature: str) -> None:
        """Delete the refresh token holding `signature`."""
        await self.refresh_tokens.delete(signature)

    async def revoke_refresh_token(self, request_id: str) -> None:
        """Revoke the refresh token issued for `request_id`."""
        await self.refresh_tokens.revoke(request_id)

    async def revoke_refresh_token_maybe_grace_period(
        self, request_id: str, signature: str
    ) -> None:
        """Revoke a refresh token being rotated out."""
        await self.refresh_tokens.revoke_maybe_grace_period(request_id, signature)

    async def revoke_all(self, request_id: str) -> None:
        """Revoke the access and refresh tokens of one grant together.

        Raises `NotFoundError` only when neither kind exists for the request.
        """
        async with translate_db_errors("revoke_all"):
            async with self.db_manager.session() as db:
                async with db.begin():
                    access = await AccessTokenRepository(db).set_inactive(request_id)
                    refresh = await RefreshTokenRepository(db).set_inactive(request_id)
        if not (access or refresh):
            raise NotFoundError("no tokens for request")
        logger.info(
            "grant_revoked", request_id=request_id, access=access, refresh=refresh
        )

    # PKCE

    async def create_pkce_request_session(
        self, signature: str, request: TokenRequest
    ) -> None:
        """Store a PKCE request under its signature."""
        await self.pkce_requests.create_session(signature, request)

    async def get_pkce_request_session(self, signature: str) -> TokenRequest:
        """Return the PKCE request stored under `signature`."""
        return await self.pkce_requests.get_session(signature)

    async def delete_pkce_request_session(self, signature: str) -> None:
        """Delete a PKCE request once it is consumed."""
        await self.pkce_requests.delete(signature)


@asynccontextmanager
async def open_storage(
    url: str | None = None,
    *,
    create_schema: bool = True,
    seed: bool = False,
    prune_jtis: bool = True,
) -> AsyncIterator[Storage]:
    """Open the database, yield a `Storage`, and close everything on exit."""
    db_manager = DatabaseSessionManager(url)
    db_manager.open()
    storage = Storage(db_manager)
    pruner = JtiPruner(storage.replay_guard)
    try:
        if create_schema:
            async with translate_db_errors("create_schema"):
                await db_manager.create_all()
        if seed:
            await seed_registry(db_manager)
        if prune_jtis:
            pruner.start()
        yield storage
    finally:
        await pruner.stop()
        await db_manager.close()

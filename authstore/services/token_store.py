"""Token stores: create, fetch, invalidate and delete token sessions."""

from authstore.core.db import DatabaseSessionManager
from authstore.core.logging import get_logger
from authstore.errors import (
    ConflictExistsError,
    InactiveTokenError,
    InvalidatedCodeError,
    NotFoundError,
    translate_db_errors,
)
from authstore.repositories.session_repository import SessionRepository
from authstore.repositories.token_repository import (
    AccessTokenRepository,
    AuthorizationCodeRepository,
    PKCERepository,
    RefreshTokenRepository,
    TokenRepository,
)
from authstore.schemas.request import TokenRequest

logger = get_logger(__name__)


class TokenSessionStore:
    """Shared implementation of the four token stores.

    Every token row references a session row written in the same
    transaction, so neither exists without the other.
    """

    kind: str
    repository_class: type[TokenRepository]
    # Rotation re-issues tokens under the same request id.
    replace_inactive: bool = False
    inactive_error: type[InvalidatedCodeError] | type[InactiveTokenError] | None = None

    def __init__(self, db_manager: DatabaseSessionManager):
        """Constructor."""
        self.db_manager = db_manager

    async def create_session(self, key: str, request: TokenRequest) -> None:
        """Upsert the request's session and insert the token row atomically."""
        async with translate_db_errors(f"create_{self.kind}"):
            async with self.db_manager.session() as db:
                async with db.begin():
                    await SessionRepository(db).upsert(request.session.to_row())
                    repo = self.repository_class(db)
                    row = request.token_row()
                    if self.replace_inactive:
                        if not await repo.create_or_replace_inactive(key, row):
                            raise ConflictExistsError(
                                f"create_{self.kind}: request id already active"
                            )
                    else:
                        await repo.create(key, row)
        logger.info(
            "token_created",
            kind=self.kind,
            request_id=request.id,
            client_id=request.client.id,
            session_id=request.session.id,
        )

    async def get_session(self, key: str) -> TokenRequest:
        """Return the stored request for `key`.

        Inactive rows of kinds with an `inactive_error` raise it with the
        request attached.
        """
        async with translate_db_errors(f"get_{self.kind}"):
            async with self.db_manager.session() as db:
                row = await self.repository_class(db).get_by_key(key)
                if row is None:
                    raise NotFoundError(f"{self.kind} not found")
                request = TokenRequest.from_row(row)
                active = row.active
        if not active and self.inactive_error is not None:
            logger.info("token_inactive", kind=self.kind, request_id=request.id)
            raise self.inactive_error(request)
        return request

    async def invalidate(self, request_id: str) -> None:
        """Mark the row created by `request_id` inactive."""
        async with translate_db_errors(f"invalidate_{self.kind}"):
            async with self.db_manager.session() as db:
                async with db.begin():
                    found = await self.repository_class(db).set_inactive(request_id)
        if not found:
            raise NotFoundError(f"{self.kind} not found")
        logger.info("token_invalidated", kind=self.kind, request_id=request_id)

    async def delete(self, key: str) -> None:
        """Hard-delete the row holding `key`."""
        async with translate_db_errors(f"delete_{self.kind}"):
            async with self.db_manager.session() as db:
                async with db.begin():
                    found = await self.repository_class(db).delete_by_key(key)
        if not found:
            raise NotFoundError(f"{self.kind} not found")
        logger.info("token_deleted", kind=self.kind)


class AuthorizeCodeStore(TokenSessionStore):
    """Authorization codes; single use."""

    kind = "authorization_code"
    repository_class = AuthorizationCodeRepository
    inactive_error = InvalidatedCodeError

    async def invalidate_code(self, code: str) -> None:
        """Consume the authorization code `code`."""
        async with translate_db_errors(f"invalidate_{self.kind}"):
            async with self.db_manager.session() as db:
                request_id = await self.repository_class(db).get_id_by_key(code)
        if request_id is None:
            raise NotFoundError(f"{self.kind} not found")
        await self.invalidate(request_id)


class AccessTokenStore(TokenSessionStore):
    """Access tokens, keyed by signature."""

    kind = "access_token"
    repository_class = AccessTokenRepository
    replace_inactive = True
    inactive_error = InactiveTokenError

    async def revoke(self, request_id: str) -> None:
        """Revoke the access token issued for `request_id`."""
        await self.invalidate(request_id)


class RefreshTokenStore(TokenSessionStore):
    """Refresh tokens, keyed by signature."""

    kind = "refresh_token"
    repository_class = RefreshTokenRepository
    replace_inactive = True
    inactive_error = InactiveTokenError

    async def revoke(self, request_id: str) -> None:
        """Revoke the refresh token issued for `request_id` (RFC 7009 2.1)."""
        await self.invalidate(request_id)

    async def revoke_maybe_grace_period(self, request_id: str, signature: str) -> None:
        """Revoke during rotation.

        No grace window is kept: the rotated-out token is revoked at once.
        """
        await self.revoke(request_id)


class PKCEStore(TokenSessionStore):
    """PKCE requests, deleted once the code is exchanged."""

    kind = "pkce_request"
    repository_class = PKCERepository

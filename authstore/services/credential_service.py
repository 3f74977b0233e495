"""Username/password verification for the login form."""

from authstore.core.crypto import dummy_secret_hash, verify_secret_pbkdf2
from authstore.core.db import DatabaseSessionManager
from authstore.core.logging import get_logger
from authstore.errors import NotFoundError, translate_db_errors
from authstore.repositories.user_repository import UserRepository
from authstore.schemas.user import UserInfo

logger = get_logger(__name__)

INVALID_CREDENTIALS = "invalid credentials"


class CredentialVerifier:
    """Checks user credentials stored as salted PBKDF2 hashes."""

    def __init__(self, db_manager: DatabaseSessionManager):
        """Constructor."""
        self.db_manager = db_manager

    async def authenticate(self, username: str, secret: str) -> None:
        """Raise `NotFoundError` unless `secret` matches the user's password.

        Unknown users and wrong passwords fail identically, and a dummy hash
        is checked for unknown users so both take the same time.
        """
        async with translate_db_errors("authenticate"):
            async with self.db_manager.session() as db:
                user = await UserRepository(db).get_by_username(username)
        stored = user.password if user is not None else dummy_secret_hash()
        matched = verify_secret_pbkdf2(secret, stored)
        if user is None or not matched:
            logger.info("authentication_failed")
            raise NotFoundError(INVALID_CREDENTIALS)

    async def get_user(self, username: str) -> UserInfo:
        """Fetch a user by username."""
        async with translate_db_errors("get_user"):
            async with self.db_manager.session() as db:
                user = await UserRepository(db).get_by_username(username)
                if user is None:
                    raise NotFoundError("user not found")
                return UserInfo.model_validate(user)

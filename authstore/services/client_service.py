"""Client registry."""

from authstore.core.crypto import dummy_secret_hash, verify_secret_pbkdf2
from authstore.core.db import DatabaseSessionManager
from authstore.core.logging import get_logger
from authstore.errors import NotFoundError, translate_db_errors
from authstore.repositories.client_repository import ClientRepository
from authstore.schemas.client import ClientInfo

logger = get_logger(__name__)


class ClientRegistry:
    """Read-only access to registered clients."""

    def __init__(self, db_manager: DatabaseSessionManager):
        """Constructor."""
        self.db_manager = db_manager

    async def get_client(self, client_id: str) -> ClientInfo:
        """Load the client by its id."""
        async with translate_db_errors("get_client"):
            async with self.db_manager.session() as db:
                client = await ClientRepository(db).get_by_id(client_id)
                if client is None:
                    raise NotFoundError("client not found")
                return ClientInfo.model_validate(client)

    async def authenticate_client(self, client_id: str, secret: str) -> ClientInfo:
        """Return the client if `secret` matches its current or a rotated hash."""
        try:
            client = await self.get_client(client_id)
        except NotFoundError:
            verify_secret_pbkdf2(secret, dummy_secret_hash())
            raise
        hashes = [client.secret, *client.rotated_secrets]
        if not any(h and verify_secret_pbkdf2(secret, h) for h in hashes):
            logger.info("client_authentication_failed", client_id=client_id)
            raise NotFoundError("client not found")
        return client

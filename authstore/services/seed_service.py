"""Registry bootstrap: idempotent upsert of clients and users."""

import uuid

from authstore.core.crypto import hash_secret_pbkdf2
from authstore.core.db import DatabaseSessionManager
from authstore.core.logging import get_logger
from authstore.errors import translate_db_errors
from authstore.oauth.consts import ClientAuthMethod, OAuth2GrantType
from authstore.repositories.client_repository import ClientRepository
from authstore.repositories.user_repository import UserRepository
from authstore.schemas.client import ClientIn
from authstore.schemas.user import UserIn

logger = get_logger(__name__)


def default_clients() -> list[ClientIn]:
    """Demo clients; secrets are "foobar" with "foobaz" as a rotated secret."""
    secret = hash_secret_pbkdf2("foobar")
    rotated = [hash_secret_pbkdf2("foobaz")]
    scopes = ["fosite", "photos", "offline"]
    grants = [
        OAuth2GrantType.IMPLICIT,
        OAuth2GrantType.REFRESH_TOKEN,
        OAuth2GrantType.AUTHORIZATION_CODE,
        OAuth2GrantType.CLIENT_CREDENTIALS,
    ]
    return [
        ClientIn(
            id="client-one",
            secret=secret,
            rotated_secrets=rotated,
            redirect_uris=[
                "http://localhost:8080/callback",
                "http://127.0.0.1:8080/callback",
                "http://127.0.0.1:8080/accounts/customprovider/login/callback/",
                "http://localhost:8080/accounts/customprovider/login/callback/",
            ],
            scopes=scopes,
            grant_types=grants,
            response_types=["code", "token", "code token", "implicit"],
            token_endpoint_auth_method=ClientAuthMethod.CLIENT_SECRET_BASIC,
        ),
        ClientIn(
            id="client-two",
            secret=secret,
            rotated_secrets=rotated,
            scopes=scopes,
            grant_types=grants,
            response_types=["code", "token", "code token"],
            token_endpoint_auth_method=ClientAuthMethod.CLIENT_SECRET_BASIC,
        ),
    ]


def default_users() -> list[UserIn]:
    """Demo resource owners."""
    return [UserIn(name="Charles Doe", username="ovl_doe", password="12345678")]


async def seed_registry(
    db_manager: DatabaseSessionManager,
    clients: list[ClientIn] | None = None,
    users: list[UserIn] | None = None,
) -> None:
    """Upsert clients by id and users by username; safe to re-run."""
    clients = default_clients() if clients is None else clients
    users = default_users() if users is None else users
    async with translate_db_errors("seed_registry"):
        async with db_manager.session() as db:
            async with db.begin():
                client_repo = ClientRepository(db)
                for client in clients:
                    await client_repo.upsert(client.model_dump())
                user_repo = UserRepository(db)
                for user in users:
                    row = user.model_dump(exclude={"password"})
                    row["id"] = user.id or str(uuid.uuid4())
                    row["password"] = hash_secret_pbkdf2(user.password)
                    await user_repo.upsert(row)
    logger.info("registry_seeded", clients=len(clients), users=len(users))

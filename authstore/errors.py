"""Errors raised by the token and session store."""

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from sqlalchemy import exc as sa_exc

if TYPE_CHECKING:
    from authstore.schemas.request import TokenRequest


class StoreError(Exception):
    """Base class for store errors."""

    kind = "store_error"


class NotFoundError(StoreError):
    """No row matches the requested key."""

    kind = "not_found"


class InvalidatedCodeError(StoreError):
    """Authorization code was already consumed.

    The original request is kept on `request` so callers can revoke
    anything minted from the reused code.
    """

    kind = "invalidated_code"

    def __init__(self, request: "TokenRequest", message: str = "invalidated_code"):
        """Constructor."""
        super().__init__(message)
        self.request = request


class InactiveTokenError(StoreError):
    """Token exists but has been revoked."""

    kind = "inactive_token"

    def __init__(self, request: "TokenRequest", message: str = "inactive_token"):
        """Constructor."""
        super().__init__(message)
        self.request = request


class ReplayDetectedError(StoreError):
    """Client assertion JTI is already known and not yet expired."""

    kind = "replay_detected"

    def __init__(self, jti: str):
        """Constructor."""
        super().__init__("jti_known")
        self.jti = jti


class ConflictExistsError(StoreError):
    """A uniqueness constraint was violated on create."""

    kind = "conflict_exists"


class StorageUnavailableError(StoreError):
    """The datastore could not complete the operation; may be retried."""

    kind = "storage_unavailable"


@asynccontextmanager
async def translate_db_errors(operation: str) -> AsyncIterator[None]:
    """Map datastore failures raised inside the block onto store errors."""
    try:
        yield
    except StoreError:
        raise
    except sa_exc.IntegrityError as ex:
        raise ConflictExistsError(f"{operation}: already exists") from ex
    except (sa_exc.OperationalError, sa_exc.DBAPIError, sa_exc.TimeoutError) as ex:
        raise StorageUnavailableError(f"{operation}: {ex.__class__.__name__}") from ex
    except (TimeoutError, asyncio.TimeoutError) as ex:
        raise StorageUnavailableError(f"{operation}: timeout") from ex

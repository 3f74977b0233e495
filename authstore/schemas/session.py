"""Session attached to every issued token."""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from authstore.config import settings
from authstore.core.types import utcnow
from authstore.oauth.consts import TokenType
from authstore.schemas.user import UserInfo


class OAuthSession(BaseModel):
    """Authenticated user/client context carried by a token request.

    Request handlers mutate their own copy; use `clone` before handing a
    session to another request.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    client_id: str = ""
    user_id: str | None = None
    username: str = ""
    subject: str = ""
    expires_at: dict[str, datetime] = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)
    user: UserInfo | None = None

    @classmethod
    def new(
        cls,
        client_id: str,
        user_id: str | None,
        username: str,
        subject: str,
        extra: dict[str, Any] | None = None,
    ) -> "OAuthSession":
        """Start a session for a fresh authorization with a new id."""
        return cls(
            id=str(uuid.uuid4()),
            client_id=client_id,
            user_id=user_id,
            username=username,
            subject=subject,
            extra=dict(extra or {}),
        )

    def set_expires_at(self, token_type: str, when: datetime) -> None:
        """Set the expiry of one token type.

        session.set_expires_at(TokenType.ACCESS_TOKEN, utcnow() + timedelta(hours=1))
        """
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        self.expires_at[token_type] = when

    def get_expires_at(self, token_type: str) -> datetime | None:
        """Return the expiry of one token type, or None if never set."""
        return self.expires_at.get(token_type)

    def set_default_expiry(self, now: datetime | None = None) -> None:
        """Fill unset code, access and refresh expiries from the configured TTLs."""
        now = now or utcnow()
        lifespans = {
            TokenType.AUTHORIZE_CODE: settings.AUTH_CODE_TTL,
            TokenType.ACCESS_TOKEN: settings.ACCESS_TOKEN_TTL,
            TokenType.REFRESH_TOKEN: settings.REFRESH_TOKEN_TTL,
        }
        for token_type, seconds in lifespans.items():
            if token_type not in self.expires_at:
                self.set_expires_at(token_type, now + timedelta(seconds=seconds))

    def get_username(self) -> str:
        """Return the username of the resource owner."""
        return self.username

    def get_subject(self) -> str:
        """Return the subject of the session."""
        return self.subject

    def get_extra_claims(self) -> dict[str, Any]:
        """Return a copy of the extra claims."""
        return copy.deepcopy(self.extra)

    def clone(self) -> "OAuthSession":
        """Copy every field so the clone can be mutated independently."""
        return OAuthSession(
            id=self.id,
            client_id=self.client_id,
            user_id=self.user_id,
            username=self.username,
            subject=self.subject,
            expires_at=dict(self.expires_at),
            extra=copy.deepcopy(self.extra),
            user=self.user.model_copy() if self.user is not None else None,
        )

    def to_row(self) -> dict[str, Any]:
        """Column values for the `sessions` table."""
        return {
            "id": self.id,
            "client_id": self.client_id,
            "user_id": self.user_id,
            "username": self.username,
            "subject": self.subject,
            "expires_at": {
                k: v.astimezone(timezone.utc).isoformat()
                for k, v in self.expires_at.items()
            },
            "extra": self.model_dump(mode="json", include={"extra"})["extra"],
        }

    @classmethod
    def from_row(cls, row) -> "OAuthSession":
        """Build a session from a `Session` row loaded with its user."""
        user = row.user
        return cls(
            id=row.id,
            client_id=row.client_id,
            user_id=row.user_id,
            username=row.username,
            subject=row.subject,
            expires_at=row.expires_at or {},
            extra=row.extra or {},
            user=UserInfo.model_validate(user) if user is not None else None,
        )

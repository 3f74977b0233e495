"""Snapshot of an authorization request stored with each token."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from authstore.core.types import utcnow
from authstore.schemas.client import ClientInfo
from authstore.schemas.session import OAuthSession


class TokenRequest(BaseModel):
    """Request data persisted with an authorization code, token or PKCE row."""

    id: str = Field(description="Id of the request that started the grant")
    requested_at: datetime = Field(default_factory=utcnow)
    client: ClientInfo
    requested_scopes: list[str] = Field(default_factory=list)
    granted_scopes: list[str] = Field(default_factory=list)
    requested_audience: list[str] = Field(default_factory=list)
    granted_audience: list[str] = Field(default_factory=list)
    form: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Original request parameters",
        examples=[{"redirect_uri": ["http://localhost:8080/callback"]}],
    )
    session: OAuthSession

    def token_row(self) -> dict[str, Any]:
        """Column values shared by every token table."""
        return {
            "id": self.id,
            "active": True,
            "requested_at": self.requested_at,
            "client_id": self.client.id,
            "requested_scopes": list(self.requested_scopes),
            "granted_scopes": list(self.granted_scopes),
            "requested_audience": list(self.requested_audience),
            "granted_audience": list(self.granted_audience),
            "form": {k: list(v) for k, v in self.form.items()},
            "session_id": self.session.id,
        }

    @classmethod
    def from_row(cls, row) -> "TokenRequest":
        """Rebuild the request from a token row loaded with client and session."""
        return cls(
            id=row.id,
            requested_at=row.requested_at,
            client=ClientInfo.model_validate(row.client),
            requested_scopes=row.requested_scopes,
            granted_scopes=row.granted_scopes,
            requested_audience=row.requested_audience,
            granted_audience=row.granted_audience,
            form=row.form or {},
            session=OAuthSession.from_row(row.session),
        )

"""Schemas for registered clients."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from authstore.oauth.consts import CLIENT_AUTH_METHODS


class ClientInfo(BaseModel):
    """Read-only view of a registered OAuth2 client."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    active: bool = True
    secret: str = Field(default="", repr=False)
    rotated_secrets: list[str] = Field(default_factory=list, repr=False)
    public: bool = False
    redirect_uris: list[str] = Field(default_factory=list)
    scopes: list[str] = Field(default_factory=list)
    audience: list[str] = Field(default_factory=list)
    grant_types: list[str] = Field(default_factory=list)
    response_types: list[str] = Field(
        default_factory=list,
        description="Allowed combinations, each a space separated set",
        examples=[["code", "token", "code token"]],
    )
    token_endpoint_auth_method: str = "client_secret_basic"

    def get_id(self) -> str:
        """Return the client id."""
        return self.id

    def get_hashed_secret(self) -> bytes:
        """Return the secret hash exactly as stored."""
        return self.secret.encode("utf-8")

    def get_rotated_hashes(self) -> list[bytes]:
        """Return previous secret hashes still accepted for this client."""
        return [s.encode("utf-8") for s in self.rotated_secrets]

    def get_redirect_uris(self) -> list[str]:
        """Return the registered redirect URIs."""
        return list(self.redirect_uris)

    def get_grant_types(self) -> list[str]:
        """Return the allowed grant types."""
        return list(self.grant_types)

    def get_response_types(self) -> list[str]:
        """Return the allowed response types."""
        return list(self.response_types)

    def get_scopes(self) -> list[str]:
        """Return the scopes the client may request."""
        return list(self.scopes)

    def get_audience(self) -> list[str]:
        """Return the audiences the client may request."""
        return list(self.audience)

    def is_public(self) -> bool:
        """Whether the client has no secret."""
        return self.public


class ClientIn(BaseModel):
    """Client registration payload used by the registry bootstrap."""

    id: str
    active: bool = True
    secret: str = Field(default="", description="Already hashed secret")
    rotated_secrets: list[str] = Field(default_factory=list)
    public: bool = False
    redirect_uris: list[str] = Field(default_factory=list)
    scopes: list[str] = Field(default_factory=list)
    audience: list[str] = Field(default_factory=list)
    grant_types: list[str] = Field(default_factory=list)
    response_types: list[str] = Field(default_factory=list)
    token_endpoint_auth_method: str = "client_secret_basic"

    @field_validator("token_endpoint_auth_method")
    @classmethod
    def _check_auth_method(cls, value: str) -> str:
        """Normalize and validate the token endpoint auth method."""
        method = value.lower()
        if method not in set(CLIENT_AUTH_METHODS):
            raise ValueError("invalid_method")
        return method

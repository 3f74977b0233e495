"""Schemas for resource owners."""

from pydantic import BaseModel, ConfigDict, Field


class UserInfo(BaseModel):
    """User as loaded alongside a session. Never carries the credential."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    active: bool = True
    name: str = ""
    username: str


class UserIn(BaseModel):
    """User payload used by the registry bootstrap."""

    id: str | None = Field(default=None, description="Generated when omitted")
    active: bool = True
    name: str = ""
    username: str
    password: str = Field(description="Plaintext; hashed before storage", repr=False)

"""Models for the authorization server database."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    MetaData,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from authstore.core.types import JSONType, StringList, UTCDateTime


class Base(DeclarativeBase):
    """Base class for declarative models."""

    metadata = MetaData()


class AuditMixin:
    """Creation, update and soft-delete timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True, onupdate=func.now()
    )
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class User(AuditMixin, Base):
    """Resource owner able to log in through the authorize endpoint."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    username: Mapped[str] = mapped_column(Text, nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)


class UserRole(Base):
    """UserRole model."""

    __tablename__ = "user_roles"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[str] = mapped_column(Text, nullable=False)


class Client(AuditMixin, Base):
    """OAuth2 client registration."""

    __tablename__ = "clients"
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    secret: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rotated_secrets: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    redirect_uris: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    scopes: Mapped[list[str]] = mapped_column(StringList, nullable=False, default=list)
    audience: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    grant_types: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    response_types: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    token_endpoint_auth_method: Mapped[str] = mapped_column(
        Text, nullable=False, default="client_secret_basic"
    )


class ClientAssertionReplay(Base):
    """JTI of a client assertion that has already been presented."""

    __tablename__ = "client_assertion_replays"
    __table_args__ = (
        UniqueConstraint("jti", name="uq_client_assertion_replays_jti"),
    )
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    jti: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class Session(AuditMixin, Base):
    """Authenticated user/client context shared by the tokens of one grant."""

    __tablename__ = "sessions"
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    client_id: Mapped[str] = mapped_column(
        ForeignKey("clients.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="SET NULL"),
        nullable=True,
    )
    username: Mapped[str] = mapped_column(Text, nullable=False, default="")
    subject: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expires_at: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    extra: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    client: Mapped["Client"] = relationship(lazy="raise")
    user: Mapped[Optional["User"]] = relationship(lazy="raise")


class TokenMixin(AuditMixin):
    """Columns shared by every request-bearing token table."""

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    requested_scopes: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    granted_scopes: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    requested_audience: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    granted_audience: Mapped[list[str]] = mapped_column(
        StringList, nullable=False, default=list
    )
    form: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    client_id: Mapped[str] = mapped_column(
        ForeignKey("clients.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    session_id: Mapped[str] = mapped_column(
        ForeignKey("sessions.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )


class AuthorizationCode(TokenMixin, Base):
    """Authorization code issued by the authorize endpoint."""

    __tablename__ = "authorization_codes"
    __table_args__ = (UniqueConstraint("code", name="uq_authorization_codes_code"),)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    client: Mapped["Client"] = relationship(lazy="raise")
    session: Mapped["Session"] = relationship(lazy="raise")


class AccessToken(TokenMixin, Base):
    """AccessToken model."""

    __tablename__ = "access_tokens"
    __table_args__ = (
        UniqueConstraint("signature", name="uq_access_tokens_signature"),
    )
    signature: Mapped[str] = mapped_column(Text, nullable=False)
    client: Mapped["Client"] = relationship(lazy="raise")
    session: Mapped["Session"] = relationship(lazy="raise")


class RefreshToken(TokenMixin, Base):
    """RefreshToken model."""

    __tablename__ = "refresh_tokens"
    __table_args__ = (
        UniqueConstraint("signature", name="uq_refresh_tokens_signature"),
    )
    signature: Mapped[str] = mapped_column(Text, nullable=False)
    client: Mapped["Client"] = relationship(lazy="raise")
    session: Mapped["Session"] = relationship(lazy="raise")


class PKCERequest(TokenMixin, Base):
    """Code challenge recorded for a PKCE-protected authorization code."""

    __tablename__ = "pkce_requests"
    __table_args__ = (
        UniqueConstraint("signature", name="uq_pkce_requests_signature"),
    )
    signature: Mapped[str] = mapped_column(Text, nullable=False)
    client: Mapped["Client"] = relationship(lazy="raise")
    session: Mapped["Session"] = relationship(lazy="raise")

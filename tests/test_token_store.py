"""Tests for the authorization code, access, refresh and PKCE stores."""

import asyncio
import uuid
from datetime import timedelta

import pytest

from authstore.core.types import utcnow
from authstore.errors import (
    ConflictExistsError,
    InactiveTokenError,
    InvalidatedCodeError,
    NotFoundError,
)
from authstore.oauth.consts import TokenType
from authstore.repositories.session_repository import SessionRepository

SCOPES = ["fosite", "photos", "offline"]
AUDIENCE = ["https://api.example.com"]


class TestAuthorizeCodeStore:
    """Authorization codes are single use but keep their data."""

    @pytest.mark.asyncio
    async def test_create_then_get_returns_stored_request(self, storage, make_request):
        request = make_request()
        await storage.create_authorize_code_session("code-1", request)

        got = await storage.get_authorize_code_session("code-1")

        assert got.id == request.id
        assert got.requested_scopes == SCOPES
        assert got.granted_scopes == SCOPES
        assert got.requested_audience == AUDIENCE
        assert got.granted_audience == AUDIENCE
        assert got.form == request.form
        assert got.requested_at == request.requested_at
        assert got.client.id == "client-one"
        assert got.session.id == request.session.id
        assert got.session.user is not None
        assert got.session.user.username == "ovl_doe"
        assert got.session.get_extra_claims() == request.session.extra

    @pytest.mark.asyncio
    async def test_invalidated_code_still_returns_request(self, storage, make_request):
        request = make_request()
        await storage.create_authorize_code_session("code-2", request)

        await storage.invalidate_authorize_code_session("code-2")

        with pytest.raises(InvalidatedCodeError) as exc_info:
            await storage.get_authorize_code_session("code-2")
        assert exc_info.value.request.id == request.id
        assert exc_info.value.request.granted_scopes == SCOPES

    @pytest.mark.asyncio
    async def test_invalidate_by_request_id(self, storage, make_request):
        request = make_request()
        await storage.create_authorize_code_session("code-3", request)

        await storage.authorize_codes.invalidate(request.id)

        with pytest.raises(InvalidatedCodeError):
            await storage.get_authorize_code_session("code-3")

    @pytest.mark.asyncio
    async def test_unknown_code(self, storage):
        with pytest.raises(NotFoundError):
            await storage.get_authorize_code_session("missing")
        with pytest.raises(NotFoundError):
            await storage.invalidate_authorize_code_session("missing")
        with pytest.raises(NotFoundError):
            await storage.authorize_codes.invalidate("missing-request")

    @pytest.mark.asyncio
    async def test_duplicate_code_leaves_no_orphan_session(
        self, storage, make_request, db_manager
    ):
        await storage.create_authorize_code_session("code-4", make_request())
        second = make_request()

        with pytest.raises(ConflictExistsError):
            await storage.create_authorize_code_session("code-4", second)

        async with db_manager.session() as db:
            assert await SessionRepository(db).get_by_id(second.session.id) is None


class TestAccessAndRefreshTokens:
    """Access and refresh tokens are revoked, rotated and deleted."""

    @pytest.mark.asyncio
    async def test_concurrent_create_same_signature(self, storage, make_request):
        requests = [make_request() for _ in range(5)]

        results = await asyncio.gather(
            *(storage.create_access_token_session("sig-shared", r) for r in requests),
            return_exceptions=True,
        )

        successes = [r for r in results if r is None]
        conflicts = [r for r in results if isinstance(r, ConflictExistsError)]
        assert len(successes) == 1
        assert len(conflicts) == 4

    @pytest.mark.asyncio
    async def test_revoke_all_only_touches_one_request(self, storage, make_request):
        first = make_request()
        other = make_request()
        for request, suffix in ((first, "a"), (other, "b")):
            await storage.create_access_token_session(f"at-{suffix}", request)
            await storage.create_refresh_token_session(f"rt-{suffix}", request)

        await storage.revoke_all(first.id)

        with pytest.raises(InactiveTokenError) as exc_info:
            await storage.get_access_token_session("at-a")
        assert exc_info.value.request.id == first.id
        with pytest.raises(InactiveTokenError):
            await storage.get_refresh_token_session("rt-a")
        assert (await storage.get_access_token_session("at-b")).id == other.id
        assert (await storage.get_refresh_token_session("rt-b")).id == other.id

    @pytest.mark.asyncio
    async def test_revoke_all_unknown_request(self, storage):
        with pytest.raises(NotFoundError):
            await storage.revoke_all(str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_refresh_rotation_reuses_request_id(self, storage, make_request):
        request = make_request()
        await storage.create_refresh_token_session("rt-old", request)

        with pytest.raises(ConflictExistsError):
            await storage.create_refresh_token_session("rt-new", request)

        await storage.revoke_refresh_token_maybe_grace_period(request.id, "rt-old")
        await storage.create_refresh_token_session("rt-new", request)

        assert (await storage.get_refresh_token_session("rt-new")).id == request.id
        with pytest.raises(NotFoundError):
            await storage.get_refresh_token_session("rt-old")

    @pytest.mark.asyncio
    async def test_revoke_access_token(self, storage, make_request):
        request = make_request()
        await storage.create_access_token_session("at-revoke", request)

        await storage.revoke_access_token(request.id)

        with pytest.raises(InactiveTokenError):
            await storage.get_access_token_session("at-revoke")
        with pytest.raises(NotFoundError):
            await storage.revoke_refresh_token(request.id)

    @pytest.mark.asyncio
    async def test_delete_tokens(self, storage, make_request):
        request = make_request()
        await storage.create_access_token_session("at-del", request)
        await storage.create_refresh_token_session("rt-del", request)

        await storage.delete_access_token_session("at-del")
        await storage.delete_refresh_token_session("rt-del")

        with pytest.raises(NotFoundError):
            await storage.get_access_token_session("at-del")
        with pytest.raises(NotFoundError):
            await storage.get_refresh_token_session("rt-del")
        with pytest.raises(NotFoundError):
            await storage.delete_access_token_session("at-del")

    @pytest.mark.asyncio
    async def test_session_is_upserted_across_tokens(
        self, storage, make_request, make_session
    ):
        session = make_session()
        access_request = make_request(session=session)
        await storage.create_access_token_session("at-shared", access_request)

        updated = session.clone()
        updated.extra["organisation_id"] = "org-1"
        expires = utcnow() + timedelta(days=1)
        updated.set_expires_at(TokenType.REFRESH_TOKEN, expires)
        refresh_request = make_request(request_id=access_request.id, session=updated)
        await storage.create_refresh_token_session("rt-shared", refresh_request)

        got = await storage.get_access_token_session("at-shared")
        assert got.session.id == session.id
        assert got.session.extra["organisation_id"] == "org-1"
        assert got.session.get_expires_at(TokenType.REFRESH_TOKEN) == expires
        assert got.session.get_expires_at(TokenType.ACCESS_TOKEN) is None

    @pytest.mark.asyncio
    async def test_scopes_with_separator_round_trip(self, storage, make_request):
        scopes = ["fosite", "photos;offline", "read:all"]
        await storage.create_access_token_session(
            "at-scopes", make_request(scopes=scopes)
        )

        got = await storage.get_access_token_session("at-scopes")

        assert got.granted_scopes == scopes


class TestPKCEStore:
    """PKCE requests are deleted once consumed."""

    @pytest.mark.asyncio
    async def test_delete_after_consumption(self, storage, make_request):
        request = make_request()
        await storage.create_pkce_request_session("pkce-1", request)
        assert (await storage.get_pkce_request_session("pkce-1")).id == request.id

        await storage.delete_pkce_request_session("pkce-1")

        with pytest.raises(NotFoundError):
            await storage.get_pkce_request_session("pkce-1")

    @pytest.mark.asyncio
    async def test_duplicate_signature(self, storage, make_request):
        await storage.create_pkce_request_session("pkce-2", make_request())

        with pytest.raises(ConflictExistsError):
            await storage.create_pkce_request_session("pkce-2", make_request())

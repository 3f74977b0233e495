"""Tests for scope granting."""

from authstore.oauth.consts import OAuth2GrantType
from authstore.oauth.policy import granted_scopes_for


class TestGrantedScopes:
    def test_client_credentials_grants_everything_requested(self):
        assert granted_scopes_for(
            [OAuth2GrantType.CLIENT_CREDENTIALS], ["fosite", "photos"]
        ) == ["fosite", "photos"]

    def test_user_grants_need_consent(self):
        granted = granted_scopes_for(
            [OAuth2GrantType.AUTHORIZATION_CODE, OAuth2GrantType.REFRESH_TOKEN],
            ["photos", "fosite", "offline"],
            consented_scopes=["offline", "photos"],
        )

        assert granted == ["photos", "offline"]

    def test_mixed_grants_need_consent(self):
        assert (
            granted_scopes_for(
                [OAuth2GrantType.CLIENT_CREDENTIALS, OAuth2GrantType.IMPLICIT],
                ["fosite"],
            )
            == []
        )

    def test_duplicates_are_dropped(self):
        assert granted_scopes_for(
            ["client_credentials"], ["fosite", "fosite", "photos"]
        ) == ["fosite", "photos"]

"""OAuth2/OIDC constants."""


class TokenType:
    """Token types used as keys of a session's expiry map."""

    AUTHORIZE_CODE = "authorize_code"
    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"
    ID_TOKEN = "id_token"


class OAuth2GrantType:
    """OAuth2 grant types."""

    AUTHORIZATION_CODE = "authorization_code"
    CLIENT_CREDENTIALS = "client_credentials"
    IMPLICIT = "implicit"
    REFRESH_TOKEN = "refresh_token"


class ClientAuthMethod:
    """OAuth2 client authentication methods."""

    PRIVATE_KEY_JWT = "private_key_jwt"
    CLIENT_SECRET_BASIC = "client_secret_basic"
    CLIENT_SECRET_POST = "client_secret_post"
    NONE = "none"


CLIENT_AUTH_METHODS: tuple[str, ...] = (
    ClientAuthMethod.PRIVATE_KEY_JWT,
    ClientAuthMethod.CLIENT_SECRET_BASIC,
    ClientAuthMethod.CLIENT_SECRET_POST,
    ClientAuthMethod.NONE,
)

"""Scope granting policy per grant type."""

from typing import Iterable

from authstore.oauth.consts import OAuth2GrantType


def granted_scopes_for(
    grant_types: Iterable[str],
    requested_scopes: Iterable[str],
    consented_scopes: Iterable[str] = (),
) -> list[str]:
    """Return the scopes to grant for a request, in request order.

    Client credentials grants have no resource owner to consent, so every
    requested scope (already checked against the client) is granted.
    Otherwise only requested scopes the user consented to are granted.
    """
    requested = list(dict.fromkeys(requested_scopes))
    if list(grant_types) == [OAuth2GrantType.CLIENT_CREDENTIALS]:
        return requested
    consented = set(consented_scopes)
    return [s for s in requested if s in consented]

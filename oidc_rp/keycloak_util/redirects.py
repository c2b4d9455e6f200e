"""Browser redirect URLs for the Keycloak authorization and end-session endpoints."""

from __future__ import annotations

from urllib.parse import quote

from .config import ProviderEndpoint

DEFAULT_SCOPE = "openid"


def _encode(value: str) -> str:
    return quote(value, safe="")


def build_login_redirect(
    endpoint: ProviderEndpoint,
    client_id: str,
    redirect_uri: str,
    scope: str = DEFAULT_SCOPE,
) -> str:
    """Return the URL that sends the user's browser to the Keycloak login page."""
    return (
        f"{endpoint.auth_url}?"
        f"client_id={_encode(client_id)}"
        "&response_type=code"
        f"&scope={_encode(scope)}"
        f"&redirect_uri={_encode(redirect_uri)}"
    )


def build_logout_redirect(
    endpoint: ProviderEndpoint,
    client_id: str,
    id_token: str | None,
    post_logout_redirect_uri: str,
) -> str:
    """
    Return the end-session URL.

    ``id_token`` goes in unencoded: a compact JWT is base64url segments joined
    by dots, all of which are query-safe. Without one the hint is left out and
    Keycloak asks the user to confirm the logout.
    """
    hint = f"&id_token_hint={id_token}" if id_token else ""
    return (
        f"{endpoint.logout_url}?"
        f"client_id={_encode(client_id)}"
        f"{hint}"
        f"&post_logout_redirect_uri={_encode(post_logout_redirect_uri)}"
    )

"""Cookie-backed browser session holding the Keycloak tokens."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import Response

from oidc_rp.keycloak_util import TokenSet, VerifiedClaims

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
ID_TOKEN_COOKIE = "id_token"
DISPLAY_NAME_COOKIE = "display_name"

SESSION_COOKIES = (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, ID_TOKEN_COOKIE, DISPLAY_NAME_COOKIE)


def set_session_cookies(
    response: Response,
    tokens: TokenSet,
    claims: VerifiedClaims,
    secure: bool = False,
    now: float | None = None,
) -> int:
    """
    Store a freshly verified token set on ``response``.

    Every cookie lives as long as the access token. Returns that lifetime in
    seconds (never negative).
    """
    max_age = max(claims.remaining_seconds(now), 0)

    def _set(name: str, value: str | None, httponly: bool = True) -> None:
        if value is None:
            response.delete_cookie(name)
            return
        response.set_cookie(name, value, max_age=max_age, httponly=httponly, secure=secure, samesite="lax")

    _set(ACCESS_TOKEN_COOKIE, tokens.access_token)
    _set(REFRESH_TOKEN_COOKIE, tokens.refresh_token)
    _set(ID_TOKEN_COOKIE, tokens.id_token)
    # Readable by the page script; percent-encoded since headers are latin-1.
    display_name = quote(claims.display_name, safe="") if claims.display_name else None
    _set(DISPLAY_NAME_COOKIE, display_name, httponly=False)
    return max_age


def clear_session_cookies(response: Response) -> None:
    for name in SESSION_COOKIES:
        response.delete_cookie(name)

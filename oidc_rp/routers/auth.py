from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse

from oidc_rp.keycloak_util import KeycloakClient, OIDCError, VerifiedClaims
from oidc_rp.schemas.auth import ClaimsOut, MessageOut
from oidc_rp.security.dependencies import get_current_claims, get_keycloak_client
from oidc_rp.security.session import (
    ID_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    clear_session_cookies,
    set_session_cookies,
)
from oidc_rp.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/login")
def login(client: KeycloakClient = Depends(get_keycloak_client)) -> RedirectResponse:
    return RedirectResponse(client.login_url(), status_code=status.HTTP_302_FOUND)


@router.get("/callback")
def callback(
    code: str | None = None,
    client: KeycloakClient = Depends(get_keycloak_client),
) -> RedirectResponse:
    if not code:
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)

    try:
        tokens = client.exchange_code(code)
        claims = client.verify(tokens.access_token)
    except OIDCError as exc:
        logger.error("Error exchanging code for token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to exchange code for token",
        ) from exc

    response = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    set_session_cookies(response, tokens, claims, secure=get_settings().cookie_secure)
    return response


@router.get("/refresh-token", response_model=MessageOut)
def refresh_token(
    request: Request,
    response: Response,
    client: KeycloakClient = Depends(get_keycloak_client),
) -> MessageOut:
    current = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not current:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No refresh token found")

    try:
        tokens = client.refresh(current)
        claims = client.verify(tokens.access_token)
    except OIDCError as exc:
        logger.error("Error refreshing access token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to refresh access token",
        ) from exc

    set_session_cookies(response, tokens, claims, secure=get_settings().cookie_secure)
    return MessageOut(message="Access token refreshed successfully")


@router.get("/logout")
def logout(request: Request, client: KeycloakClient = Depends(get_keycloak_client)) -> RedirectResponse:
    post_logout = get_settings().post_logout_redirect_uri
    url = client.logout_url(request.cookies.get(ID_TOKEN_COOKIE), post_logout)
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    clear_session_cookies(response)
    return response


@router.get("/me", response_model=ClaimsOut)
def me(claims: VerifiedClaims = Depends(get_current_claims)) -> ClaimsOut:
    return ClaimsOut(**claims.to_dict(), expires_in=max(claims.remaining_seconds(), 0))

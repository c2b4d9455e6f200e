from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status

from oidc_rp.keycloak_util import KeycloakClient, TokenVerificationError, VerifiedClaims
from oidc_rp.security.session import ACCESS_TOKEN_COOKIE

logger = logging.getLogger(__name__)


def get_keycloak_client(request: Request) -> KeycloakClient:
    client = getattr(request.app.state, "keycloak", None)
    if client is None:
        raise RuntimeError("Keycloak client not configured. Did app startup run?")
    return client


def get_current_claims(
    request: Request,
    client: KeycloakClient = Depends(get_keycloak_client),
) -> VerifiedClaims:
    """
    Verified claims of the access token held in the session cookie.

    Any verification failure is a 401; the unverified token is never read.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    try:
        return client.verify(token)
    except TokenVerificationError as exc:
        logger.info("Session token rejected: %s", type(exc).__name__)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session") from exc

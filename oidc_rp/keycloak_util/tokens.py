"""
Authorization-code and refresh-token exchanges against the Keycloak token endpoint.

The returned ``TokenSet`` is not yet trusted: the access token still has to go
through ``AccessTokenVerifier`` before any claim in it is used.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import ClientCredential, ProviderEndpoint
from .errors import TokenExchangeError, TokenRefreshError
from .http_client import OIDCHttpClient, ProviderHTTPError

logger = logging.getLogger(__name__)

_SENSITIVE_FIELDS = ("client_secret", "code", "refresh_token")


class InvalidTokenResponse(ValueError):
    """Provider answered 2xx but the body is not a usable token set."""

    pass


@dataclass(frozen=True)
class TokenSet:
    """Tokens from one exchange or refresh call, plus the provider response as received."""

    access_token: str = field(repr=False)
    expires_in: int
    refresh_token: str | None = field(default=None, repr=False)
    id_token: str | None = field(default=None, repr=False)
    refresh_expires_in: int | None = None
    token_type: str | None = None
    scope: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, payload: Any) -> TokenSet:
        """Coerce an untyped token-endpoint JSON body. Missing required fields are rejected."""
        if not isinstance(payload, dict):
            raise InvalidTokenResponse("token response is not a JSON object")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise InvalidTokenResponse("token response has no access_token")

        expires_in = _as_int(payload.get("expires_in"))
        if expires_in is None:
            raise InvalidTokenResponse("token response has no valid expires_in")

        return cls(
            access_token=access_token,
            expires_in=expires_in,
            refresh_token=_as_str(payload.get("refresh_token")),
            id_token=_as_str(payload.get("id_token")),
            refresh_expires_in=_as_int(payload.get("refresh_expires_in")),
            token_type=_as_str(payload.get("token_type")),
            scope=_as_str(payload.get("scope")),
            raw=dict(payload),
        )


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


class TokenExchanger:
    """Performs the two token-endpoint grants for one registered client."""

    def __init__(
        self,
        endpoint: ProviderEndpoint,
        credential: ClientCredential,
        http: OIDCHttpClient,
    ) -> None:
        self._endpoint = endpoint
        self._credential = credential
        self._http = http

    def exchange_authorization_code(self, redirect_uri: str, code: str) -> TokenSet:
        """
        Trade an authorization code for tokens.

        ``redirect_uri`` must be the one used for the login redirect.
        Raises TokenExchangeError on any transport, status or body problem.
        """
        data = {
            "grant_type": "authorization_code",
            "client_id": self._credential.client_id,
            "client_secret": self._credential.client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        }
        try:
            return self._post(data)
        except (ProviderHTTPError, InvalidTokenResponse) as e:
            logger.warning("Authorization code exchange failed: %s", type(e).__name__)
            raise TokenExchangeError(f"Exchange token by code failed: {e}") from e

    def refresh(self, refresh_token: str) -> TokenSet:
        """Obtain a new token set. An expired or revoked refresh token raises TokenRefreshError."""
        data = {
            "grant_type": "refresh_token",
            "client_id": self._credential.client_id,
            "client_secret": self._credential.client_secret,
            "refresh_token": refresh_token,
        }
        try:
            return self._post(data)
        except (ProviderHTTPError, InvalidTokenResponse) as e:
            logger.warning("Token refresh failed: %s", type(e).__name__)
            raise TokenRefreshError(f"Token refresh failed: {e}") from e

    def _post(self, data: dict[str, str]) -> TokenSet:
        body = self._http.post_form(self._endpoint.token_url, data, sensitive=_SENSITIVE_FIELDS)
        return TokenSet.from_response(body)

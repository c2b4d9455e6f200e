"""Facade wiring redirects, token exchange and verification from one KeycloakConfig."""

from __future__ import annotations

from .config import KeycloakConfig
from .context import VerifiedClaims
from .http_client import OIDCHttpClient
from .redirects import build_login_redirect, build_logout_redirect
from .tokens import TokenExchanger, TokenSet
from .validator import AccessTokenVerifier


class KeycloakClient:
    """
    Everything the web layer needs for the authorization code flow.

    Holds one ``OIDCHttpClient``. When none is passed in, the client builds
    and owns it, and ``close`` releases its pooled connections.
    """

    def __init__(self, config: KeycloakConfig | None = None, http: OIDCHttpClient | None = None) -> None:
        self._config = config or KeycloakConfig.from_environ()
        self._owns_http = http is None
        self._http = http or OIDCHttpClient(
            timeout=self._config.http_timeout_seconds,
            ca_bundle=self._config.ca_bundle,
        )
        self._exchanger = TokenExchanger(self._config.endpoint, self._config.credential, self._http)
        self._verifier = AccessTokenVerifier(
            self._config.endpoint,
            self._http,
            audience=self._config.audience,
            leeway_seconds=self._config.clock_skew_seconds,
            verify_issuer=self._config.verify_issuer,
            key_cache_ttl_seconds=self._config.jwks_cache_ttl_seconds,
        )

    @property
    def config(self) -> KeycloakConfig:
        return self._config

    def login_url(self) -> str:
        return build_login_redirect(
            self._config.endpoint,
            self._config.client_id,
            self._config.redirect_uri,
            scope=self._config.scope,
        )

    def logout_url(self, id_token: str | None, post_logout_redirect_uri: str | None = None) -> str:
        return build_logout_redirect(
            self._config.endpoint,
            self._config.client_id,
            id_token,
            post_logout_redirect_uri or self._config.redirect_uri,
        )

    def exchange_code(self, code: str) -> TokenSet:
        return self._exchanger.exchange_authorization_code(self._config.redirect_uri, code)

    def refresh(self, refresh_token: str) -> TokenSet:
        return self._exchanger.refresh(refresh_token)

    def verify(self, access_token: str) -> VerifiedClaims:
        return self._verifier.verify_access_token(access_token)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> KeycloakClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

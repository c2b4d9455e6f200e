"""
Standalone Keycloak OpenID Connect relying-party core.

This package has no dependency on other app packages (oidc_rp.routers, oidc_rp.security, etc.).
Use KeycloakClient for the whole authorization code flow, or the individual
pieces (redirect builders, TokenExchanger, AccessTokenVerifier) directly.
"""

from .client import KeycloakClient
from .config import ClientCredential, KeycloakConfig, ProviderEndpoint
from .context import VerifiedClaims, remaining_lifetime
from .errors import (
    KeyNotFoundError,
    OIDCError,
    TokenExchangeError,
    TokenExpiredError,
    TokenRefreshError,
    TokenVerificationError,
)
from .http_client import OIDCHttpClient
from .keys import SigningKey, SigningKeyCache
from .redirects import build_login_redirect, build_logout_redirect
from .tokens import TokenExchanger, TokenSet
from .validator import AccessTokenVerifier, verify_access_token

__all__ = [
    "AccessTokenVerifier",
    "ClientCredential",
    "KeyNotFoundError",
    "KeycloakClient",
    "KeycloakConfig",
    "OIDCError",
    "OIDCHttpClient",
    "ProviderEndpoint",
    "SigningKey",
    "SigningKeyCache",
    "TokenExchangeError",
    "TokenExchanger",
    "TokenExpiredError",
    "TokenRefreshError",
    "TokenSet",
    "TokenVerificationError",
    "VerifiedClaims",
    "build_login_redirect",
    "build_logout_redirect",
    "remaining_lifetime",
    "verify_access_token",
]

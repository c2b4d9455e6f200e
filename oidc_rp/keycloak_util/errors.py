"""Errors raised by the Keycloak relying-party core. Messages never carry secrets or tokens."""

from __future__ import annotations


class OIDCError(Exception):
    """Base class for every failure of an OIDC operation."""

    pass


class TokenExchangeError(OIDCError):
    """Authorization code could not be exchanged for a token set."""

    pass


class TokenRefreshError(OIDCError):
    """Refresh token was rejected or the refresh call failed."""

    pass


class TokenVerificationError(OIDCError):
    """Access token is untrusted: signature, algorithm, audience or lifetime check failed."""

    pass


class KeyNotFoundError(TokenVerificationError):
    """No key in the provider's key set matches the token's ``kid``."""

    pass


class TokenExpiredError(TokenVerificationError):
    pass

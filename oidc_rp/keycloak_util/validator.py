"""
Validate a Keycloak-signed access token and extract its claims.

Background for newcomers:
    After the code exchange the app holds an access token (a JWT) it received
    straight from Keycloak. Before we trust **anything** in that token we:

    1. Look up the signing key named by the token header's ``kid`` in the
       realm's published key set.
    2. Verify the **signature** with that key, accepting RS256 only. A token
       claiming ``alg: none`` or an HMAC algorithm is rejected outright.
    3. Check the **audience** (``aud``) is the expected one (``account`` for
       a stock Keycloak realm).
    4. Check it hasn't **expired** (``exp``) and isn't used before ``nbf``.

    Only then is a ``VerifiedClaims`` built. Any failure raises a
    ``TokenVerificationError`` subclass; callers must treat the token as
    untrusted and never fall back to its unverified contents.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt

from .config import KeycloakConfig, ProviderEndpoint
from .context import VerifiedClaims
from .errors import KeyNotFoundError, TokenExpiredError, TokenVerificationError
from .http_client import OIDCHttpClient, ProviderHTTPError
from .keys import SigningKeyCache

logger = logging.getLogger(__name__)

ALLOWED_ALGORITHMS = ["RS256"]


def _get_kid(token: str) -> str | None:
    """Read ``kid`` from the JWT header **without** validating the token."""
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise TokenVerificationError("Token verification failed: malformed token header") from e
    kid = header.get("kid") if isinstance(header, dict) else None
    return kid if isinstance(kid, str) and kid else None


def _build_claims(payload: dict[str, Any]) -> VerifiedClaims:
    aud = payload.get("aud")
    if isinstance(aud, str):
        audience: tuple[str, ...] = (aud,)
    elif isinstance(aud, list):
        audience = tuple(str(a) for a in aud)
    else:
        audience = ()

    display_name = payload.get("display_name") or payload.get("name")
    preferred_username = payload.get("preferred_username")
    subject = payload.get("sub")
    issuer = payload.get("iss")

    return VerifiedClaims(
        subject=str(subject) if subject is not None else None,
        audience=audience,
        exp=int(payload["exp"]),
        issuer=str(issuer) if issuer is not None else None,
        display_name=str(display_name) if display_name else None,
        preferred_username=str(preferred_username) if preferred_username else None,
        claims=dict(payload),
    )


class AccessTokenVerifier:
    """
    Verifies Keycloak access tokens against the realm's key set.

    By default the key set is re-fetched for every token; pass
    ``key_cache_ttl_seconds`` to cache it.
    """

    def __init__(
        self,
        endpoint: ProviderEndpoint,
        http: OIDCHttpClient,
        audience: str = "account",
        leeway_seconds: int = 0,
        verify_issuer: bool = False,
        key_cache_ttl_seconds: int = 0,
    ) -> None:
        self._audience = audience
        self._leeway = leeway_seconds
        self._issuer = endpoint.issuer if verify_issuer else None
        self._keys = SigningKeyCache(endpoint.certs_url, http, key_cache_ttl_seconds)

    def verify_access_token(self, token: str) -> VerifiedClaims:
        """
        Validate ``token`` and return its claims.

        Raises KeyNotFoundError when no published key matches the token's
        ``kid``, TokenExpiredError when ``exp`` has passed, and
        TokenVerificationError for everything else.
        """
        kid = _get_kid(token)
        if kid is None:
            logger.debug("Token missing kid")
            raise KeyNotFoundError("Token verification failed: public key not found for token")

        try:
            signing_key = self._keys.get_signing_key(kid)
        except (ProviderHTTPError, ValueError) as e:
            logger.warning("Key set fetch failed: %s", type(e).__name__)
            raise TokenVerificationError(f"Token verification failed: key set unavailable ({e})") from e

        if signing_key is None:
            logger.info("No signing key found for kid")
            raise KeyNotFoundError("Token verification failed: public key not found for token")

        try:
            public_key = signing_key.public_key()
        except (ValueError, jwt.PyJWTError) as e:
            logger.warning("Unusable signing key material for kid")
            raise TokenVerificationError("Token verification failed: invalid signing key material") from e

        try:
            payload = jwt.decode(
                token,
                public_key,
                algorithms=ALLOWED_ALGORITHMS,
                audience=self._audience,
                issuer=self._issuer,
                leeway=self._leeway,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_aud": True,
                    "require": ["exp"],
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise TokenExpiredError("Token verification failed: token expired") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise TokenVerificationError("Token verification failed: invalid audience") from e
        except jwt.InvalidAlgorithmError as e:
            logger.info("Token signed with a disallowed algorithm")
            raise TokenVerificationError("Token verification failed: algorithm not allowed") from e
        except (jwt.PyJWTError, TypeError) as e:
            # PyJWT raises TypeError when the key does not fit the algorithm.
            logger.info("Token invalid: %s", type(e).__name__)
            raise TokenVerificationError(f"Token verification failed: {type(e).__name__}") from e

        return _build_claims(payload)


def verify_access_token(
    token: str,
    config: KeycloakConfig | None = None,
    http: OIDCHttpClient | None = None,
) -> VerifiedClaims:
    """
    Convenience function: verify ``token`` with a throwaway verifier.

    Loads config from the environment if ``config`` is None. Prefer
    ``KeycloakClient`` when verifying many tokens so the HTTP pool (and the
    key cache, if enabled) is reused.
    """
    config = config or KeycloakConfig.from_environ()
    if http is not None:
        return _verifier_for(config, http).verify_access_token(token)
    with OIDCHttpClient(timeout=config.http_timeout_seconds, ca_bundle=config.ca_bundle) as owned:
        return _verifier_for(config, owned).verify_access_token(token)


def _verifier_for(config: KeycloakConfig, http: OIDCHttpClient) -> AccessTokenVerifier:
    return AccessTokenVerifier(
        config.endpoint,
        http,
        audience=config.audience,
        leeway_seconds=config.clock_skew_seconds,
        verify_issuer=config.verify_issuer,
        key_cache_ttl_seconds=config.jwks_cache_ttl_seconds,
    )

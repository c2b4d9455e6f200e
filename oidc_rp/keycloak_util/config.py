"""Configuration from environment variables. No hardcoded secrets."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _getenv(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _getenv_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _getenv_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _getenv_bool(key: str) -> bool:
    return (_getenv(key, "") or "").strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class ProviderEndpoint:
    """A Keycloak server and realm. All endpoint URLs hang off ``realm_url``."""

    server_url: str
    realm: str

    @property
    def realm_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/realms/{self.realm}"

    @property
    def issuer(self) -> str:
        return self.realm_url

    @property
    def auth_url(self) -> str:
        return f"{self.realm_url}/protocol/openid-connect/auth"

    @property
    def token_url(self) -> str:
        return f"{self.realm_url}/protocol/openid-connect/token"

    @property
    def certs_url(self) -> str:
        return f"{self.realm_url}/protocol/openid-connect/certs"

    @property
    def logout_url(self) -> str:
        return f"{self.realm_url}/protocol/openid-connect/logout"


@dataclass(frozen=True)
class ClientCredential:
    """Relying-party registration. The secret never shows up in ``repr``."""

    client_id: str
    client_secret: str = field(repr=False)


@dataclass(frozen=True)
class KeycloakConfig:
    """
    Keycloak relying-party configuration from environment.

    Required:
        KEYCLOAK_SERVER_URL: Base URL of the Keycloak server.
        KEYCLOAK_REALM: Realm the client is registered in.
        KEYCLOAK_CLIENT_ID / KEYCLOAK_CLIENT_SECRET: Confidential client credentials.
        REDIRECT_URI: Callback URL registered for the client.

    Optional:
        KEYCLOAK_AUDIENCE: Expected ``aud`` of access tokens (default "account").
        KEYCLOAK_EXTRA_SCOPES: Space-separated scopes requested besides ``openid``.
        KEYCLOAK_VERIFY_ISSUER: Set to 1 or true to also check ``iss``.
        CLOCK_SKEW_SECONDS: Seconds of tolerance for exp/nbf (default 0).
        JWKS_CACHE_TTL_SECONDS: How long to cache the key set (default 0, fetch every time).
        HTTP_TIMEOUT_SECONDS: Per-request timeout towards Keycloak (default 10).
        KEYCLOAK_CA_BUNDLE: Path to a CA bundle for a privately signed Keycloak.
    """

    endpoint: ProviderEndpoint
    credential: ClientCredential
    redirect_uri: str
    audience: str = "account"
    extra_scopes: tuple[str, ...] = ()
    verify_issuer: bool = False
    clock_skew_seconds: int = 0
    jwks_cache_ttl_seconds: int = 0
    http_timeout_seconds: float = 10.0
    ca_bundle: str | None = None

    @property
    def client_id(self) -> str:
        return self.credential.client_id

    @property
    def scope(self) -> str:
        scopes = ["openid"] + [s for s in self.extra_scopes if s != "openid"]
        return " ".join(scopes)

    @classmethod
    def from_environ(cls) -> KeycloakConfig:
        required = {
            key: _strip_or_none(_getenv(key))
            for key in (
                "KEYCLOAK_SERVER_URL",
                "KEYCLOAK_REALM",
                "KEYCLOAK_CLIENT_ID",
                "KEYCLOAK_CLIENT_SECRET",
                "REDIRECT_URI",
            )
        }
        missing = [key for key, value in required.items() if not value]
        if missing:
            raise _config_error(f"Missing required environment variables: {', '.join(missing)}")
        return cls(
            endpoint=ProviderEndpoint(
                server_url=required["KEYCLOAK_SERVER_URL"],
                realm=required["KEYCLOAK_REALM"],
            ),
            credential=ClientCredential(
                client_id=required["KEYCLOAK_CLIENT_ID"],
                client_secret=required["KEYCLOAK_CLIENT_SECRET"],
            ),
            redirect_uri=required["REDIRECT_URI"],
            audience=_strip_or_none(_getenv("KEYCLOAK_AUDIENCE")) or "account",
            extra_scopes=tuple((_getenv("KEYCLOAK_EXTRA_SCOPES") or "").split()),
            verify_issuer=_getenv_bool("KEYCLOAK_VERIFY_ISSUER"),
            clock_skew_seconds=_getenv_int("CLOCK_SKEW_SECONDS", 0),
            jwks_cache_ttl_seconds=_getenv_int("JWKS_CACHE_TTL_SECONDS", 0),
            http_timeout_seconds=_getenv_float("HTTP_TIMEOUT_SECONDS", 10.0),
            ca_bundle=_strip_or_none(_getenv("KEYCLOAK_CA_BUNDLE")),
        )


def _strip_or_none(s: str | None) -> str | None:
    if s is None:
        return None
    t = s.strip()
    return t if t else None


def _config_error(msg: str) -> Exception:
    return ValueError(msg)

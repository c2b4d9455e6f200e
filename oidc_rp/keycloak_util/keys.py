"""
Keycloak signing keys and an optional TTL cache in front of the certs endpoint.

Background:
    Keycloak signs access tokens with a realm RSA key and publishes the public
    half at ``/protocol/openid-connect/certs``. Each entry carries a ``kid``
    and, in ``x5c[0]``, the base64 DER certificate holding the public key.

    With ``ttl_seconds=0`` (the default) the key set is fetched on every
    lookup, so a rotated or revoked key is never used. A positive TTL trades
    that for fewer round-trips; an unknown ``kid`` then forces one refresh
    before the lookup gives up, which covers key rotation.
"""

from __future__ import annotations

import logging
import textwrap
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt import PyJWK

from .http_client import OIDCHttpClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningKey:
    kid: str
    algorithm: str | None
    x5c: tuple[str, ...]
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_jwk(cls, jwk: Mapping[str, Any]) -> SigningKey | None:
        """Return None for entries that cannot identify themselves (no ``kid``)."""
        kid = jwk.get("kid")
        if not isinstance(kid, str) or not kid:
            return None
        x5c = jwk.get("x5c") or ()
        if not isinstance(x5c, (list, tuple)):
            x5c = ()
        alg = jwk.get("alg")
        return cls(
            kid=kid,
            algorithm=alg if isinstance(alg, str) else None,
            x5c=tuple(str(c) for c in x5c),
            raw=dict(jwk),
        )

    def certificate_pem(self) -> str | None:
        if not self.x5c:
            return None
        body = "\n".join(textwrap.wrap(self.x5c[0].strip(), 64))
        return f"-----BEGIN CERTIFICATE-----\n{body}\n-----END CERTIFICATE-----\n"

    def public_key(self) -> Any:
        """
        Public key usable by ``jwt.decode``.

        Prefers the certificate in ``x5c``; falls back to the JWK modulus and
        exponent. Raises ValueError or a ``jwt.PyJWTError`` subclass on bad
        material, and ValueError for anything that is not an RSA key (realms
        may also publish EC keys).
        """
        pem = self.certificate_pem()
        if pem is not None:
            key = x509.load_pem_x509_certificate(pem.encode("ascii")).public_key()
        else:
            key = PyJWK.from_dict(dict(self.raw)).key
        if not isinstance(key, rsa.RSAPublicKey):
            raise ValueError(f"signing key {self.kid} is not an RSA public key")
        return key


def parse_key_set(data: Any) -> dict[str, SigningKey]:
    """Index a JWKS document by ``kid``. Malformed entries are skipped."""
    if not isinstance(data, dict):
        raise ValueError("key set is not a JSON object")
    keys = data.get("keys")
    if not isinstance(keys, list):
        raise ValueError("key set has no 'keys' list")
    indexed: dict[str, SigningKey] = {}
    for entry in keys:
        if not isinstance(entry, dict):
            continue
        key = SigningKey.from_jwk(entry)
        if key is not None:
            indexed[key.kid] = key
    return indexed


class SigningKeyCache:
    """
    Key-set lookups by ``kid`` with an optional TTL.

    Raises ``ProviderHTTPError`` (from the HTTP client) or ValueError when the
    key set cannot be fetched or parsed.
    """

    def __init__(self, certs_url: str, http: OIDCHttpClient, ttl_seconds: int = 0) -> None:
        self._url = certs_url
        self._http = http
        self._ttl = max(ttl_seconds, 0)
        self._keys: dict[str, SigningKey] | None = None
        self._fetched_at: float = 0.0
        self._lock = threading.Lock()

    def _refresh(self) -> dict[str, SigningKey]:
        keys = parse_key_set(self._http.get_json(self._url))
        with self._lock:
            self._keys = keys
            self._fetched_at = time.monotonic()
        logger.debug("Key set refreshed uri=%s keys=%d", self._url, len(keys))
        return keys

    def _cached(self) -> dict[str, SigningKey] | None:
        if self._ttl == 0:
            return None
        with self._lock:
            if self._keys is None or (time.monotonic() - self._fetched_at) >= self._ttl:
                return None
            return self._keys

    def get_signing_key(self, kid: str) -> SigningKey | None:
        cached = self._cached()
        if cached is None:
            return self._refresh().get(kid)

        key = cached.get(kid)
        if key is not None:
            return key

        logger.info("kid not in cached key set; refreshing for possible key rotation")
        return self._refresh().get(kid)

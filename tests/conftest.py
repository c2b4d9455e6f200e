"""
Pytest fixtures for the test suite.

Signing material is real: an RSA key pair and a self-signed certificate are
generated once per session, and the fake Keycloak key set publishes the
certificate in ``x5c`` the same way a realm does.
"""
from __future__ import annotations

import base64
import datetime
import time
from typing import Any
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from oidc_rp.keycloak_util.config import ClientCredential, KeycloakConfig, ProviderEndpoint
from oidc_rp.keycloak_util.http_client import OIDCHttpClient

KID = "realm-key-1"
SERVER_URL = "https://sso.example.com"
REALM = "demo"
CLIENT_ID = "web-app"
CLIENT_SECRET = "s3cr3t-value"
REDIRECT_URI = "https://app.example.com/callback"


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def certificate_b64(private_key) -> str:
    """Base64 DER of a self-signed certificate, as published in ``x5c[0]``."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, REALM)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(private_key, hashes.SHA256())
    )
    return base64.b64encode(cert.public_bytes(serialization.Encoding.DER)).decode("ascii")


@pytest.fixture
def jwks(certificate_b64) -> dict[str, Any]:
    return {
        "keys": [
            {
                "kid": "enc-key",
                "kty": "RSA",
                "alg": "RSA-OAEP",
                "use": "enc",
                "x5c": [certificate_b64],
            },
            {
                "kid": KID,
                "kty": "RSA",
                "alg": "RS256",
                "use": "sig",
                "x5c": [certificate_b64],
            },
        ]
    }


@pytest.fixture
def make_token(private_key):
    """Sign an access token with the realm key; override claims or header as needed."""

    def _make(kid: str | None = KID, **overrides: Any) -> str:
        now = int(time.time())
        payload: dict[str, Any] = {
            "sub": "user-1",
            "aud": "account",
            "iss": f"{SERVER_URL}/realms/{REALM}",
            "iat": now,
            "exp": now + 300,
            "preferred_username": "jdoe",
            "display_name": "Jane Doe",
        }
        payload.update(overrides)
        headers = {"kid": kid} if kid is not None else {}
        return jwt.encode(payload, private_key, algorithm="RS256", headers=headers)

    return _make


@pytest.fixture
def endpoint() -> ProviderEndpoint:
    return ProviderEndpoint(server_url=SERVER_URL, realm=REALM)


@pytest.fixture
def credential() -> ClientCredential:
    return ClientCredential(client_id=CLIENT_ID, client_secret=CLIENT_SECRET)


@pytest.fixture
def config(endpoint, credential) -> KeycloakConfig:
    return KeycloakConfig(endpoint=endpoint, credential=credential, redirect_uri=REDIRECT_URI)


@pytest.fixture
def http() -> MagicMock:
    """Stand-in for the shared transport; set ``get_json`` / ``post_form`` per test."""
    return MagicMock(spec=OIDCHttpClient)

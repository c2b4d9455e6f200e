"""Tests for signing-key parsing and the optional key-set cache."""

from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm

from oidc_rp.keycloak_util.keys import SigningKey, SigningKeyCache, parse_key_set

CERTS_URL = "https://sso.example.com/realms/demo/protocol/openid-connect/certs"


def test_parse_key_set_indexes_by_kid(jwks):
    keys = parse_key_set(jwks)
    assert sorted(keys) == ["enc-key", "realm-key-1"]
    assert keys["realm-key-1"].algorithm == "RS256"


def test_parse_key_set_skips_entries_without_kid(certificate_b64):
    keys = parse_key_set({"keys": [{"kty": "RSA", "x5c": [certificate_b64]}, "junk"]})
    assert keys == {}


@pytest.mark.parametrize("data", [None, [], {"keys": "nope"}, {}])
def test_parse_key_set_rejects_malformed_documents(data):
    with pytest.raises(ValueError):
        parse_key_set(data)


def test_certificate_is_wrapped_in_pem_envelope(certificate_b64):
    key = SigningKey.from_jwk({"kid": "k", "x5c": [certificate_b64]})
    pem = key.certificate_pem()
    assert pem.startswith("-----BEGIN CERTIFICATE-----\n")
    assert pem.rstrip().endswith("-----END CERTIFICATE-----")
    assert all(len(line) <= 64 for line in pem.splitlines())


def test_public_key_from_certificate(certificate_b64, private_key):
    key = SigningKey.from_jwk({"kid": "k", "x5c": [certificate_b64]})
    public_key = key.public_key()
    assert isinstance(public_key, rsa.RSAPublicKey)
    assert public_key.public_numbers() == private_key.public_key().public_numbers()


def test_no_ttl_fetches_on_every_lookup(http, jwks):
    http.get_json.return_value = jwks
    cache = SigningKeyCache(CERTS_URL, http)
    assert cache.get_signing_key("realm-key-1") is not None
    assert cache.get_signing_key("realm-key-1") is not None
    assert http.get_json.call_count == 2


def test_no_ttl_unknown_kid_fetches_once(http, jwks):
    http.get_json.return_value = jwks
    cache = SigningKeyCache(CERTS_URL, http)
    assert cache.get_signing_key("missing") is None
    assert http.get_json.call_count == 1


def test_ttl_cache_reuses_key_set(http, jwks):
    http.get_json.return_value = jwks
    cache = SigningKeyCache(CERTS_URL, http, ttl_seconds=3600)
    cache.get_signing_key("realm-key-1")
    cache.get_signing_key("realm-key-1")
    assert http.get_json.call_count == 1


def test_ttl_cache_refreshes_once_on_unknown_kid(http, jwks, certificate_b64):
    rotated = {"keys": [{"kid": "new-key", "kty": "RSA", "x5c": [certificate_b64]}]}
    http.get_json.side_effect = [jwks, rotated, rotated]
    cache = SigningKeyCache(CERTS_URL, http, ttl_seconds=3600)
    cache.get_signing_key("realm-key-1")
    assert cache.get_signing_key("new-key").kid == "new-key"
    assert http.get_json.call_count == 2
    # The rotated-out key is looked up once more, then given up on.
    assert cache.get_signing_key("realm-key-1") is None
    assert http.get_json.call_count == 3


def test_ttl_expiry_triggers_refetch(http, jwks):
    http.get_json.return_value = jwks
    cache = SigningKeyCache(CERTS_URL, http, ttl_seconds=60)
    with patch("oidc_rp.keycloak_util.keys.time.monotonic", side_effect=[1000.0, 1010.0, 1100.0, 1100.0]):
        cache.get_signing_key("realm-key-1")
        cache.get_signing_key("realm-key-1")
        cache.get_signing_key("realm-key-1")
    assert http.get_json.call_count == 2


def test_ec_jwk_is_not_a_usable_signing_key():
    jwk = ECAlgorithm.to_jwk(ec.generate_private_key(ec.SECP256R1()).public_key(), as_dict=True)
    jwk.update({"kid": "ec-key", "alg": "ES256"})
    key = SigningKey.from_jwk(jwk)
    with pytest.raises(ValueError, match="not an RSA public key"):
        key.public_key()

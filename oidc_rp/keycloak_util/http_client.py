"""
HTTP transport towards Keycloak.

One ``OIDCHttpClient`` is built per process (or per test) and handed to every
component that talks to the provider. It wraps a ``requests.Session`` with a
pooled adapter so token and key-set calls reuse TLS connections. Certificate
verification is always on; a private CA can be supplied via ``ca_bundle``.

No retries happen here. Every failure (DNS, TLS, timeout, non-2xx status,
non-JSON body) surfaces as ``ProviderHTTPError`` and the calling operation
wraps it into its own error kind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

_MAX_DETAIL_CHARS = 200


class ProviderHTTPError(Exception):
    """Transport or status failure of a call to the identity provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OIDCHttpClient:
    """
    Shared, read-only transport configuration for Keycloak calls.

    Use as a context manager (or call ``close``) to release pooled
    connections when the owning application shuts down.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        ca_bundle: str | None = None,
        pool_maxsize: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._owns_session = session is None
        self._session = session or requests.Session()
        if self._owns_session:
            adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_maxsize, max_retries=0)
            self._session.mount("https://", adapter)
            self._session.mount("http://", adapter)
        self._verify: bool | str = ca_bundle if ca_bundle else True

    @property
    def timeout(self) -> float:
        return self._timeout

    def get_json(self, url: str) -> Any:
        try:
            resp = self._session.get(url, timeout=self._timeout, verify=self._verify)
        except requests.RequestException as e:
            raise ProviderHTTPError(f"request failed: {type(e).__name__}: {e}") from e
        return _json_or_raise(resp)

    def post_form(
        self,
        url: str,
        data: Mapping[str, str],
        sensitive: Iterable[str] = (),
    ) -> Any:
        """
        POST ``data`` as ``application/x-www-form-urlencoded`` and return the JSON body.

        Values of the form fields named in ``sensitive`` are redacted from any
        error message raised.
        """
        secrets = [data[name] for name in sensitive if data.get(name)]
        try:
            resp = self._session.post(
                url,
                data=dict(data),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout,
                verify=self._verify,
            )
        except requests.RequestException as e:
            raise ProviderHTTPError(_redact(f"request failed: {type(e).__name__}: {e}", secrets)) from e
        try:
            return _json_or_raise(resp)
        except ProviderHTTPError as e:
            raise ProviderHTTPError(_redact(str(e), secrets), e.status_code) from None

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> OIDCHttpClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _json_or_raise(resp: requests.Response) -> Any:
    if not 200 <= resp.status_code < 300:
        detail = _error_detail(resp)
        logger.info("Provider returned status=%s", resp.status_code)
        raise ProviderHTTPError(f"status {resp.status_code}: {detail}", resp.status_code)
    try:
        return resp.json()
    except ValueError as e:
        raise ProviderHTTPError("response body is not valid JSON", resp.status_code) from e


def _error_detail(resp: requests.Response) -> str:
    """Keycloak error bodies look like ``{"error": ..., "error_description": ...}``."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        description = body.get("error_description")
        return f"{body['error']}: {description}" if description else str(body["error"])
    text = (resp.text or "").strip()
    return text[:_MAX_DETAIL_CHARS] if text else (resp.reason or "no detail")


def _redact(message: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        message = message.replace(secret, "***")
    return message

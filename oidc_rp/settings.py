from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Web-layer settings.

    Notes:
    - Keycloak connection settings live in ``KeycloakConfig`` (KEYCLOAK_* env vars);
      this class only covers how the app itself behaves.
    - Override via env vars with the ``APP_`` prefix.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    log_level: str = "INFO"
    cookie_secure: bool = False
    post_logout_redirect_uri: str | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()

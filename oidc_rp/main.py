from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from oidc_rp.keycloak_util import KeycloakClient
from oidc_rp.logging_config import configure_app_logging
from oidc_rp.routers import auth, health
from oidc_rp.settings import get_settings

logger = logging.getLogger(__name__)


def create_app(keycloak: KeycloakClient | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        client = keycloak or KeycloakClient()
        app.state.keycloak = client
        logger.info("Keycloak client ready realm_url=%s", client.config.endpoint.realm_url)

        yield

        # Shutdown: release pooled connections we own.
        if keycloak is None:
            client.close()

    app = FastAPI(lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(auth.router)

    return app


app = create_app()

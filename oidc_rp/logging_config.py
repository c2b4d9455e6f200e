from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level of the ``oidc_rp`` logger tree from ``APP_LOG_LEVEL``.

    Handlers come from whoever serves the app (uvicorn). DEBUG shows key-set
    refreshes; INFO and up show rejected tokens and failed grants by error
    kind only, never the token, code or client secret.
    """

    logger = logging.getLogger("oidc_rp")
    logger.setLevel(level.upper())
    logger.propagate = True

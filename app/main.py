"""repo-gateway main entry point.

Loads settings, builds the FastAPI app and serves it with uvicorn.
"""

from __future__ import annotations

import sys

import uvicorn

from app.core.config import get_settings
from app.core.errors import StartupError
from app.core.logging import get_logger, setup_logging
from app.web.server import create_app


def main():
    """Entry point: starts the HTTP gateway."""
    settings = get_settings()
    setup_logging(settings)
    logger = get_logger("main")

    logger.info("=" * 60)
    logger.info("repo-gateway starting (auth_mode=%s, backend=%s)", settings.auth_mode, settings.gateway_backend)
    logger.info("=" * 60)

    try:
        app = create_app(settings)
    except StartupError as exc:
        logger.error("Startup failed: %s", exc)
        sys.exit(1)

    logger.info("Listening on http://%s:%d", settings.web_host, settings.web_port)

    config = uvicorn.Config(
        app,
        host=settings.web_host,
        port=settings.web_port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
    server = uvicorn.Server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()

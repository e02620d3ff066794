"""FastAPI application factory.

:func:`create_app` wires the credential resolver and the gateway provider
into ``app.state`` and installs the exception handlers that turn every
per-request failure into ``{"error": <message>}``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.auth import CredentialResolver, StaticCredentialResolver, build_credential_resolver
from app.core.config import Settings, get_settings
from app.core.errors import GatewayError
from app.core.logging import get_logger
from app.web.routes import router
from infra.factory import GatewayProvider, SharedGatewayProvider, build_gateway_provider
from infra.forge import ForgeError, ForgeGateway, RepositoryNotFoundError

logger = get_logger("web.server")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid request"))
    return f"{location}: {message}" if location else message


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def _gateway_error(request: Request, exc: GatewayError):
        logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(ForgeError)
    async def _forge_error(request: Request, exc: ForgeError):
        status = 404 if isinstance(exc, RepositoryNotFoundError) else 400
        logger.warning("%s %s -> %d upstream: %s", request.method, request.url.path, status, exc.message)
        return JSONResponse({"error": exc.message}, status_code=status)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning("%s %s -> 400 %s", request.method, request.url.path, message)
        return JSONResponse({"error": message}, status_code=400)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=True)
        return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(
    settings: Settings | None = None,
    *,
    credential_resolver: CredentialResolver | None = None,
    gateway: ForgeGateway | None = None,
) -> FastAPI:
    """Build the gateway application.

    Args:
        settings:            Defaults to :func:`get_settings`.
        credential_resolver: Override the resolver selected by ``AUTH_MODE``.
        gateway:             Inject a gateway shared by every request
                             (typically an ``InMemoryGateway`` in tests).

    Raises:
        StartupError: static mode without ``TOKEN`` / ``OWNER``.
    """
    settings = settings or get_settings()
    resolver = credential_resolver or build_credential_resolver(settings)

    provider: GatewayProvider
    if gateway is not None:
        provider = SharedGatewayProvider(gateway)
    else:
        static_credential = (
            resolver.credential if isinstance(resolver, StaticCredentialResolver) else None
        )
        provider = build_gateway_provider(settings, credential=static_credential)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Gateway ready (auth_mode=%s, backend=%s)",
            settings.auth_mode,
            settings.gateway_backend,
        )
        yield
        provider.close()
        validator = getattr(resolver, "validator", None)
        if validator is not None:
            validator.close()

    app = FastAPI(title="repo-gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.credential_resolver = resolver
    app.state.gateway_provider = provider
    _install_exception_handlers(app)
    app.include_router(router)
    return app

"""Gateway factory.

:func:`build_gateway_provider` is the single entry-point for obtaining the
``ForgeGateway`` a request should talk to.  The provider hides whether the
gateway is shared by the whole process or built per request.

Usage::

    from infra.factory import build_gateway_provider

    provider = build_gateway_provider(settings, credential=static_credential)
    with provider.session(credential) as gateway:
        gateway.list_repositories()
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Protocol

from app.core.logging import get_logger
from infra.forge import ForgeGateway
from infra.github_client import GitHubGateway
from infra.memory_client import InMemoryGateway
from infra.seed import load_seed

if TYPE_CHECKING:
    from app.core.auth import Credential
    from app.core.config import Settings

logger = get_logger("infra.factory")


class GatewayProvider(Protocol):
    def session(self, credential: Credential) -> AbstractContextManager[ForgeGateway]: ...

    def close(self) -> None: ...


class SharedGatewayProvider:
    """Hands the same gateway to every request.

    Used for static-mode GitHub and for the in-memory backend.  The gateway
    is never reconfigured after construction.
    """

    def __init__(self, gateway: ForgeGateway) -> None:
        self.gateway = gateway

    @contextmanager
    def session(self, credential: Credential) -> Iterator[ForgeGateway]:
        yield self.gateway

    def close(self) -> None:
        close = getattr(self.gateway, "close", None)
        if callable(close):
            close()


class PerRequestGitHubProvider:
    """Builds a :class:`GitHubGateway` bound to the caller's own token."""

    def __init__(self, base_url: str, timeout: float) -> None:
        self.base_url = base_url
        self.timeout = timeout

    @contextmanager
    def session(self, credential: Credential) -> Iterator[ForgeGateway]:
        gateway = GitHubGateway(
            token=credential.token,
            owner=credential.owner,
            base_url=self.base_url,
            timeout=self.timeout,
        )
        try:
            yield gateway
        finally:
            gateway.close()

    def close(self) -> None:
        """Per-request gateways are closed as each request finishes."""


def build_gateway_provider(
    settings: Settings,
    credential: Credential | None = None,
) -> GatewayProvider:
    """Return the provider matching ``GATEWAY_BACKEND`` and ``AUTH_MODE``.

    Args:
        settings:   Application settings.
        credential: The static credential (required for static-mode GitHub).
    """
    if settings.gateway_backend == "memory":
        if settings.memory_seed_path:
            gateway: ForgeGateway = load_seed(settings.memory_seed_path)
        else:
            gateway = InMemoryGateway(owner=credential.owner if credential else "")
        logger.info("Using in-memory gateway %r", gateway)
        return SharedGatewayProvider(gateway)

    if settings.auth_mode == "static":
        if credential is None:
            raise ValueError("static auth mode requires a credential")
        logger.info("Using shared GitHub gateway for owner %s", credential.owner)
        return SharedGatewayProvider(
            GitHubGateway(
                token=credential.token,
                owner=credential.owner,
                base_url=settings.github_api_url,
                timeout=settings.github_timeout_seconds,
                pin_owner=True,
            )
        )

    logger.info("Using per-request GitHub gateways against %s", settings.github_api_url)
    return PerRequestGitHubProvider(
        base_url=settings.github_api_url,
        timeout=settings.github_timeout_seconds,
    )

"""Credential resolution: who is calling, and with which upstream token.

Two strategies, selected by ``AUTH_MODE``:

``request``
    Every call carries ``Authorization: Bearer <token>``.  The token is checked
    against the upstream ``GET /user`` endpoint before any route runs.  The
    returned ``login`` becomes the implicit owner for owner-less routes.

``static``
    ``TOKEN`` and ``OWNER`` are read once at startup.  The same credential is
    handed to every request and never re-validated.
"""

from __future__ import annotations

from typing import Protocol

import httpx
from pydantic import BaseModel, field_validator

from app.core.config import Settings
from app.core.errors import AuthenticationError, StartupError
from app.core.logging import get_logger, redact_token

logger = get_logger("core.auth")

BEARER_PREFIX = "Bearer "
MISSING_TOKEN_MESSAGE = "No authorization token provided"
INVALID_TOKEN_MESSAGE = "Invalid or badly formed GitHub token"


class Credential(BaseModel):
    """Upstream token plus the owner it acts for."""

    model_config = {"frozen": True}

    token: str
    owner: str = ""

    @field_validator("token")
    @classmethod
    def _token_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("token must not be empty")
        return v

    def __repr__(self) -> str:
        return f"Credential(token={redact_token(self.token)!r}, owner={self.owner!r})"

    __str__ = __repr__


class CredentialResolver(Protocol):
    def resolve(self, authorization: str | None) -> Credential:
        """Return the credential for a request given its raw ``Authorization`` header."""
        ...


def extract_bearer_token(authorization: str | None) -> str:
    """Strip an optional, case-sensitive ``"Bearer "`` prefix.

    Raises:
        AuthenticationError: when the header is absent or the token is empty.
    """
    if not authorization:
        raise AuthenticationError(MISSING_TOKEN_MESSAGE)
    token = authorization
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    if not token:
        raise AuthenticationError(MISSING_TOKEN_MESSAGE)
    return token


class TokenValidator:
    """Checks a token with one synchronous ``GET /user`` call.

    Args:
        base_url: API base URL.
        timeout:  HTTP timeout in seconds.
        client:   Optional pre-built ``httpx.Client`` (tests).
    """

    def __init__(
        self,
        base_url: str = "https://api.github.com",
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/user"
        self._client = client or httpx.Client(timeout=timeout)

    def validate(self, token: str) -> str:
        """Return the ``login`` the token belongs to.

        Any failure (transport, non-2xx, undecodable body, missing ``login``)
        raises the same generic :class:`AuthenticationError`.  The actual reason
        is only logged.
        """
        try:
            response = self._client.get(
                self._url,
                headers={"Authorization": f"token {token}", "Accept": "application/vnd.github+json"},
            )
        except httpx.HTTPError as exc:
            logger.debug("Token validation transport error: %s", exc)
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from exc

        if not response.is_success:
            logger.debug("Token validation rejected: status %d", response.status_code)
            raise AuthenticationError(INVALID_TOKEN_MESSAGE)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.debug("Token validation body is not JSON")
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from exc

        if not isinstance(payload, dict) or "login" not in payload:
            logger.debug("Token validation body has no login")
            raise AuthenticationError(INVALID_TOKEN_MESSAGE)

        login = payload["login"]
        return login if isinstance(login, str) else ""

    def close(self) -> None:
        self._client.close()


class RequestCredentialResolver:
    """Per-request mode: validate the caller's bearer token every time."""

    def __init__(self, validator: TokenValidator) -> None:
        self.validator = validator

    def resolve(self, authorization: str | None) -> Credential:
        token = extract_bearer_token(authorization)
        login = self.validator.validate(token)
        logger.debug("Authenticated %s with token %s", login or "<unknown>", redact_token(token))
        return Credential(token=token, owner=login)


class StaticCredentialResolver:
    """Static mode: one credential for the life of the process."""

    def __init__(self, credential: Credential) -> None:
        self.credential = credential

    def resolve(self, authorization: str | None) -> Credential:
        return self.credential


def load_static_credential(settings: Settings) -> Credential:
    """Read ``TOKEN`` and ``OWNER`` (in that order).

    Raises:
        StartupError: ``"missing token"`` or ``"missing owner"``.
    """
    token = settings.token.strip()
    owner = settings.owner.strip()
    if not token:
        raise StartupError("missing token")
    if not owner:
        raise StartupError("missing owner")
    logger.info("Static credential loaded for owner %s (token %s)", owner, redact_token(token))
    return Credential(token=token, owner=owner)


def build_credential_resolver(settings: Settings) -> CredentialResolver:
    """Return the resolver selected by ``settings.auth_mode``."""
    if settings.auth_mode == "static":
        return StaticCredentialResolver(load_static_credential(settings))
    validator = TokenValidator(
        base_url=settings.github_api_url,
        timeout=settings.github_timeout_seconds,
    )
    return RequestCredentialResolver(validator)

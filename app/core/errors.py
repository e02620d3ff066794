"""Request-level and startup error types.

Upstream failures live in :mod:`infra.forge` (``ForgeError`` and friends);
the errors here are raised by the gateway itself before any upstream call.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors answered with ``{"error": message}``."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(GatewayError):
    """Missing or invalid bearer token.  Never reaches the route logic."""

    status_code = 401


class InvalidRequestError(GatewayError):
    """Malformed body, missing required field or bad ``limit`` value."""

    status_code = 400


class StartupError(RuntimeError):
    """Static credentials are missing; the process must not start."""

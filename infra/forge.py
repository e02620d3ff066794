"""Gateway interface — abstract protocol and shared data models.

Every route talks to the upstream code host through a ``ForgeGateway``
implementation: :class:`~infra.github_client.GitHubGateway` for the real
GitHub REST API, or :class:`~infra.memory_client.InMemoryGateway` for tests
and offline runs.  Routes never issue HTTP calls of their own.

A successful operation returns its payload.  A failed operation raises a
:class:`ForgeError` (or subclass) carrying the underlying message verbatim.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from app.core.errors import InvalidRequestError


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


class Repository(BaseModel):
    """A repository owned by the authenticated / configured identity."""

    name: str
    description: str = ""
    private: bool = False


class CreatedRepository(Repository):
    """A freshly created repository.

    The authoritative fields are only known when the upstream assigned them;
    the in-memory double leaves them unset rather than inventing values.
    """

    id: int | None = None
    full_name: str | None = None
    html_url: str | None = None
    created_at: datetime | None = None


class DeletedRepository(BaseModel):
    """Confirmation of a repository deletion."""

    message: str
    name: str
    owner: str | None = None


class PullRequest(BaseModel):
    """An open pull request."""

    number: int
    title: str = ""
    author_login: str = ""
    created_at: datetime | None = None
    html_url: str = ""
    state: str = "open"
    base_repository_name: str = ""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ForgeGateway(Protocol):
    """The four repository operations the HTTP surface exposes.

    All methods are synchronous.  FastAPI runs the sync route handlers in its
    thread pool, so each request blocks only its own worker thread.
    """

    def create_repository(
        self, name: str, description: str = "", private: bool = False
    ) -> CreatedRepository:
        """Create a repository in the caller's namespace.

        Raises:
            ForgeError: when the upstream rejects the request.
        """
        ...

    def list_repositories(self) -> list[Repository]:
        """List repositories owned by the caller (single page, no org repos)."""
        ...

    def delete_repository(self, name: str, owner: str | None = None) -> DeletedRepository:
        """Delete ``owner/name``; *owner* defaults to the credential's owner.

        Raises:
            RepositoryNotFoundError: when the repository does not exist.
            ForgeError: on any other failure.
        """
        ...

    def list_open_pull_requests(
        self, repo: str, limit: int | str = 0, owner: str | None = None
    ) -> list[PullRequest]:
        """Return open pull requests of *repo* in upstream order.

        Args:
            repo:  Repository name.
            limit: Non-negative integer (or its string form); ``0`` means all.
            owner: Optional owner override.

        Raises:
            InvalidRequestError: when *limit* is not a non-negative integer.
                Raised before any upstream contact.
            RepositoryNotFoundError: when *repo* does not exist.
        """
        ...


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ForgeError(Exception):
    """Raised for any upstream (or double) failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"


class RepositoryNotFoundError(ForgeError):
    """The target repository does not exist."""

    def __init__(self, message: str = "Repository not found") -> None:
        super().__init__(message, status_code=404)


# ---------------------------------------------------------------------------
# Helpers shared by the gateways
# ---------------------------------------------------------------------------

_INTEGER_RE = re.compile(r"[+-]?\d+")


def parse_limit(raw: int | str | None, error_message: str) -> int:
    """Parse a ``limit`` query value into a non-negative int.

    ``None`` means "no limit" (``0``); an empty string is not a number.
    """
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise InvalidRequestError(error_message)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INTEGER_RE.fullmatch(raw):
        value = int(raw)
    else:
        raise InvalidRequestError(error_message)
    if value < 0:
        raise InvalidRequestError(error_message)
    return value


def apply_limit(items: list, limit: int) -> list:
    """Keep the first *limit* items; ``0`` keeps everything.  Order is preserved."""
    if 0 < limit < len(items):
        return items[:limit]
    return items

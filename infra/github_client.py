"""GitHub gateway.

Implements :class:`~infra.forge.ForgeGateway` against the GitHub REST API v3.
Authentication uses a personal access token (PAT): either the caller's
bearer token (per-request mode) or the ``TOKEN`` environment variable
(static mode).

Usage::

    from infra.github_client import GitHubGateway

    with GitHubGateway(token="ghp_...", owner="octocat") as gateway:
        repos = gateway.list_repositories()

Known limitation: list operations fetch a single page of at most
``PER_PAGE`` entries.  Anything the upstream truncates stays truncated.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from app.core.logging import get_logger
from infra.forge import (
    CreatedRepository,
    DeletedRepository,
    ForgeError,
    PullRequest,
    Repository,
    RepositoryNotFoundError,
    apply_limit,
    parse_limit,
)

logger = get_logger("infra.github")

GITHUB_API = "https://api.github.com"
PER_PAGE = 100

DELETED_MESSAGE = "Repository deleted successfully"
INVALID_LIMIT_MESSAGE = "Invalid limit parameter"


def _parse_dt(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp returned by GitHub (``2024-01-02T03:04:05Z``)."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _error_detail(item: Any) -> str:
    if isinstance(item, dict):
        if item.get("message"):
            return str(item["message"])
        parts = [str(item[key]) for key in ("resource", "field", "code") if item.get(key)]
        return " ".join(parts)
    return str(item)


def _upstream_message(response: httpx.Response) -> str:
    """Top-level ``message`` plus every ``errors[]`` entry GitHub attached."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if not isinstance(payload, dict) or not payload.get("message"):
        return response.text[:200]
    message = str(payload["message"])
    errors = payload.get("errors")
    if isinstance(errors, list):
        details = [detail for detail in (_error_detail(item) for item in errors) if detail]
        if details:
            message = f"{message} ({'; '.join(details)})"
    return message


class GitHubGateway:
    """GitHub REST API v3 gateway.

    Args:
        token:    GitHub personal access token.
        owner:    Login used when a route does not name an owner explicitly.
        base_url: API base URL.  Override in tests or for GitHub Enterprise.
        timeout:  HTTP timeout in seconds.  One attempt per call, no retries.
        pin_owner: Only *owner* may be addressed; any other owner is answered
                   as not found without contacting GitHub (static mode).
    """

    def __init__(
        self,
        token: str,
        owner: str = "",
        base_url: str = GITHUB_API,
        timeout: float = 15.0,
        pin_owner: bool = False,
    ) -> None:
        self.owner = owner
        self.pin_owner = pin_owner
        self._base_url = base_url.rstrip("/")
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(headers=headers, timeout=timeout)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("GitHub %s %s", method, path)
        try:
            response = self._client.request(method, url, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ForgeError(
                f"GitHub {method} {path} failed: {status} {_upstream_message(exc.response)}",
                status_code=status,
            ) from exc
        except httpx.RequestError as exc:
            raise ForgeError(f"GitHub {method} {path} network error: {exc}") from exc
        if not response.content:
            return None
        return response.json()

    def _resolve_owner(self, owner: str | None) -> str:
        if self.pin_owner and owner and owner != self.owner:
            logger.warning("Refusing owner %s; gateway is pinned to %s", owner, self.owner)
            raise RepositoryNotFoundError()
        resolved = (owner or self.owner).strip()
        if not resolved:
            raise ForgeError("No repository owner configured for this request")
        return resolved

    def _repo_path(self, owner: str, repo: str) -> str:
        """Return URL-encoded ``/repos/owner/name``."""
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    # ------------------------------------------------------------------
    # ForgeGateway implementation
    # ------------------------------------------------------------------

    def create_repository(
        self, name: str, description: str = "", private: bool = False
    ) -> CreatedRepository:
        """Create a repository under the authenticated user."""
        data = self._request(
            "POST",
            "/user/repos",
            json={"name": name, "description": description, "private": private},
        )
        created = CreatedRepository(
            id=data.get("id"),
            name=data.get("name", name),
            full_name=data.get("full_name"),
            description=data.get("description") or "",
            private=bool(data.get("private", private)),
            html_url=data.get("html_url"),
            created_at=_parse_dt(data.get("created_at")),
        )
        logger.info("Created repository %s", created.full_name or created.name)
        return created

    def list_repositories(self) -> list[Repository]:
        """List repositories owned by the authenticated user (one page)."""
        data = self._request(
            "GET",
            "/user/repos",
            params={"type": "owner", "per_page": PER_PAGE},
        )
        return [
            Repository(
                name=item.get("name", ""),
                description=item.get("description") or "",
                private=bool(item.get("private", False)),
            )
            for item in data or []
        ]

    def delete_repository(self, name: str, owner: str | None = None) -> DeletedRepository:
        """Delete ``owner/name``.  An upstream 404 becomes :class:`RepositoryNotFoundError`."""
        resolved = self._resolve_owner(owner)
        try:
            self._request("DELETE", self._repo_path(resolved, name))
        except ForgeError as exc:
            if exc.status_code == 404:
                raise RepositoryNotFoundError(exc.message) from exc
            raise
        logger.info("Deleted repository %s/%s", resolved, name)
        return DeletedRepository(message=DELETED_MESSAGE, name=name, owner=resolved)

    def list_open_pull_requests(
        self, repo: str, limit: int | str = 0, owner: str | None = None
    ) -> list[PullRequest]:
        """List open pull requests in upstream order, truncated to *limit*."""
        max_items = parse_limit(limit, INVALID_LIMIT_MESSAGE)
        resolved = self._resolve_owner(owner)
        try:
            data = self._request(
                "GET",
                f"{self._repo_path(resolved, repo)}/pulls",
                params={"state": "open", "per_page": PER_PAGE},
            )
        except ForgeError as exc:
            if exc.status_code == 404:
                raise RepositoryNotFoundError(exc.message) from exc
            raise

        pulls = [
            self._pull_from_dict(item, repo)
            for item in data or []
            if item.get("state", "open") == "open"
        ]
        return apply_limit(pulls, max_items)

    def _pull_from_dict(self, data: dict[str, Any], repo: str) -> PullRequest:
        base_repo = (data.get("base") or {}).get("repo") or {}
        return PullRequest(
            number=data["number"],
            title=data.get("title", ""),
            author_login=(data.get("user") or {}).get("login", ""),
            created_at=_parse_dt(data.get("created_at")),
            html_url=data.get("html_url", ""),
            state=data.get("state", "open"),
            base_repository_name=base_repo.get("name", repo),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubGateway:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:  # pragma: no cover
        return f"GitHubGateway(base_url={self._base_url!r}, owner={self.owner!r})"

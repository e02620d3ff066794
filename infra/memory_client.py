"""In-memory gateway for deterministic tests and offline runs."""

from __future__ import annotations

import threading
from collections.abc import Iterable

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

logger = get_logger("infra.memory")

DELETED_MESSAGE = "Repository successfully deleted"
INVALID_LIMIT_MESSAGE = "Invalid limit value"
DUPLICATE_MESSAGE = "name already exists on this account"


class InMemoryGateway:
    """Stand-in for the upstream provider backed by in-process collections.

    Repositories are keyed by name in insertion order; pull requests are kept
    in the order they were seeded.  All access goes through one lock so
    concurrent create/delete calls never interleave.

    Args:
        repositories:  Initial repositories.
        pull_requests: Initial pull requests (any state, any base repo).
        owner:         Reported as the owner in delete confirmations.
        fail_with:     When set, every operation fails with this message
                       without touching the collections.
    """

    def __init__(
        self,
        repositories: Iterable[Repository] | None = None,
        pull_requests: Iterable[PullRequest] | None = None,
        owner: str = "",
        fail_with: str | None = None,
    ) -> None:
        self.owner = owner
        self.fail_with = fail_with
        self._lock = threading.Lock()
        self._repositories: dict[str, Repository] = {}
        for repo in repositories or []:
            self._repositories[repo.name] = repo
        self._pull_requests: list[PullRequest] = list(pull_requests or [])

    # ── Inspection helpers (tests) ───────────────────────────────────────

    @property
    def repositories(self) -> list[Repository]:
        with self._lock:
            return list(self._repositories.values())

    @property
    def pull_requests(self) -> list[PullRequest]:
        with self._lock:
            return list(self._pull_requests)

    def add_pull_request(self, pull: PullRequest) -> None:
        with self._lock:
            self._pull_requests.append(pull)

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            raise ForgeError(self.fail_with)

    def _owner_matches(self, owner: str | None) -> bool:
        return not owner or not self.owner or owner == self.owner

    # ── ForgeGateway implementation ──────────────────────────────────────

    def create_repository(
        self, name: str, description: str = "", private: bool = False
    ) -> CreatedRepository:
        self._check_failure()
        repo = Repository(name=name, description=description, private=private)
        with self._lock:
            if name in self._repositories:
                raise ForgeError(DUPLICATE_MESSAGE)
            self._repositories[name] = repo
        logger.info("Created in-memory repository %s", name)
        return CreatedRepository(name=name, description=description, private=private)

    def list_repositories(self) -> list[Repository]:
        self._check_failure()
        return self.repositories

    def delete_repository(self, name: str, owner: str | None = None) -> DeletedRepository:
        self._check_failure()
        with self._lock:
            if not self._owner_matches(owner) or name not in self._repositories:
                raise RepositoryNotFoundError("Repository not found")
            del self._repositories[name]
        logger.info("Deleted in-memory repository %s", name)
        return DeletedRepository(message=DELETED_MESSAGE, name=name, owner=self.owner or None)

    def list_open_pull_requests(
        self, repo: str, limit: int | str = 0, owner: str | None = None
    ) -> list[PullRequest]:
        max_items = parse_limit(limit, INVALID_LIMIT_MESSAGE)
        self._check_failure()
        with self._lock:
            if not self._owner_matches(owner) or repo not in self._repositories:
                raise RepositoryNotFoundError(f"Repository '{repo}' does not exist")
            pulls = [
                pull
                for pull in self._pull_requests
                if pull.state == "open" and pull.base_repository_name == repo
            ]
        return apply_limit(pulls, max_items)

    def close(self) -> None:
        """Nothing to release; present for lifecycle symmetry with GitHubGateway."""

    def __repr__(self) -> str:  # pragma: no cover
        return f"InMemoryGateway(repos={len(self._repositories)}, pulls={len(self._pull_requests)})"

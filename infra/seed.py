"""YAML seed loader for the in-memory gateway.

Lets the ``memory`` backend serve a realistic data set when the gateway runs
without network access (demos, contract tests, local development).

Schema example (``seed.yaml``)::

    owner: octocat
    repositories:
      - name: test-repo
        description: "Sandbox repository"
        private: false
    pull_requests:
      - number: 1
        title: "Add README"
        author_login: alice
        created_at: 2024-01-02T03:04:05Z
        html_url: https://github.com/octocat/test-repo/pull/1
        state: open
        base_repository_name: test-repo
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from app.core.logging import get_logger
from infra.forge import PullRequest, Repository
from infra.memory_client import InMemoryGateway

logger = get_logger("infra.seed")


def _entries(raw: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = raw.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"seed: '{key}' must be a list, got {type(items)}")
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"seed: {key} entry {i} must be a mapping, got {type(item)}")
    return items


def load_seed(path: Path | str) -> InMemoryGateway:
    """Build an :class:`InMemoryGateway` from a YAML seed file.

    A missing file yields an empty gateway (logged as a warning).

    Raises:
        ValueError: If the YAML is malformed or contains invalid entries.
    """
    resolved = Path(path)
    if not resolved.exists():
        logger.warning("Seed file not found at %s, in-memory gateway starts empty", resolved)
        return InMemoryGateway()

    raw = yaml.safe_load(resolved.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"seed: top level must be a mapping, got {type(raw)}")

    repositories: list[Repository] = []
    for i, item in enumerate(_entries(raw, "repositories")):
        try:
            repositories.append(Repository(**item))
        except ValidationError as exc:
            raise ValueError(f"seed: invalid repository {i} ({item!r}): {exc}") from exc

    pull_requests: list[PullRequest] = []
    for i, item in enumerate(_entries(raw, "pull_requests")):
        try:
            pull_requests.append(PullRequest(**item))
        except ValidationError as exc:
            raise ValueError(f"seed: invalid pull request {i} ({item!r}): {exc}") from exc

    logger.info(
        "Seeded in-memory gateway with %d repo(s) and %d pull request(s) from %s",
        len(repositories),
        len(pull_requests),
        resolved,
    )
    return InMemoryGateway(
        repositories=repositories,
        pull_requests=pull_requests,
        owner=str(raw.get("owner") or ""),
    )

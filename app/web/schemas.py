"""Wire contracts of the HTTP surface.

Gateways return :mod:`infra.forge` models; the classes here reshape them into
the stable JSON documents callers see, so upstream field churn stays behind
the gateway.  Message strings are part of the contract.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, field_serializer

from infra.forge import CreatedRepository, DeletedRepository, PullRequest, Repository

CREATED_MESSAGE = "Repository created successfully"


def isoformat(value: datetime | None) -> str | None:
    """ISO-8601 with an explicit offset; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


# ── Requests ──────────────────────────────────────────────────────────────

class CreateRepositoryRequest(BaseModel):
    """Only ``name`` is required; ``null`` optional fields read as their defaults."""

    name: str
    description: str | None = None
    private: bool | None = None


# ── Responses ─────────────────────────────────────────────────────────────

class RepositorySummary(BaseModel):
    name: str
    description: str = ""
    private: bool = False

    @classmethod
    def from_repository(cls, repo: Repository) -> RepositorySummary:
        return cls(name=repo.name, description=repo.description, private=repo.private)


class RepositoryCreatedResponse(BaseModel):
    """Create response.  Upstream-assigned fields are omitted when unknown."""

    message: str = CREATED_MESSAGE
    name: str
    description: str = ""
    private: bool = False
    id: int | None = None
    full_name: str | None = None
    html_url: str | None = None
    created_at: datetime | None = None

    @field_serializer("created_at")
    def _serialize_created_at(self, value: datetime | None) -> str | None:
        return isoformat(value)

    @classmethod
    def from_created(cls, repo: CreatedRepository) -> RepositoryCreatedResponse:
        return cls(
            name=repo.name,
            description=repo.description,
            private=repo.private,
            id=repo.id,
            full_name=repo.full_name,
            html_url=repo.html_url,
            created_at=repo.created_at,
        )


class RepositoryDetails(BaseModel):
    owner: str
    name: str


class RepositoryDeletedResponse(BaseModel):
    """Delete response: a confirmation only, never repository content."""

    message: str
    details: RepositoryDetails | None = None

    @classmethod
    def from_deleted(cls, deleted: DeletedRepository) -> RepositoryDeletedResponse:
        details = None
        if deleted.owner:
            details = RepositoryDetails(owner=deleted.owner, name=deleted.name)
        return cls(message=deleted.message, details=details)


class PullRequestSummary(BaseModel):
    title: str
    number: int
    login: str
    created_at: datetime | None = None
    html_url: str

    @field_serializer("created_at")
    def _serialize_created_at(self, value: datetime | None) -> str | None:
        return isoformat(value)

    @classmethod
    def from_pull_request(cls, pull: PullRequest) -> PullRequestSummary:
        return cls(
            title=pull.title,
            number=pull.number,
            login=pull.author_login,
            created_at=pull.created_at,
            html_url=pull.html_url,
        )


class ErrorResponse(BaseModel):
    error: str

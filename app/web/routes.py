"""Repository routes.

Each route maps to exactly one gateway operation.  The credential and the
gateway arrive through FastAPI dependencies; routes only extract parameters
and shape the result.
"""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import APIRouter, Depends, Header, Query, Request

from app.core.auth import Credential
from app.core.errors import InvalidRequestError
from app.core.logging import get_logger
from app.web.schemas import (
    CreateRepositoryRequest,
    PullRequestSummary,
    RepositoryCreatedResponse,
    RepositoryDeletedResponse,
    RepositorySummary,
)
from infra.forge import ForgeGateway

logger = get_logger("web.routes")

router = APIRouter()


# ── Dependencies ──────────────────────────────────────────────────────────

def get_credential(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Credential:
    """Resolve the caller's credential; raises AuthenticationError (401)."""
    return request.app.state.credential_resolver.resolve(authorization)


def get_gateway(
    request: Request,
    credential: Credential = Depends(get_credential),
) -> Iterator[ForgeGateway]:
    with request.app.state.gateway_provider.session(credential) as gateway:
        yield gateway


# ── Routes ────────────────────────────────────────────────────────────────

@router.post(
    "/repositories",
    status_code=201,
    response_model=RepositoryCreatedResponse,
    response_model_exclude_none=True,
)
def create_repository(
    body: CreateRepositoryRequest,
    gateway: ForgeGateway = Depends(get_gateway),
):
    if not body.name.strip():
        raise InvalidRequestError("Repository name is required")
    created = gateway.create_repository(
        name=body.name, description=body.description or "", private=bool(body.private)
    )
    return RepositoryCreatedResponse.from_created(created)


@router.get("/repositories", response_model=list[RepositorySummary])
def list_repositories(gateway: ForgeGateway = Depends(get_gateway)):
    return [RepositorySummary.from_repository(r) for r in gateway.list_repositories()]


@router.delete(
    "/repositories/{repo}",
    response_model=RepositoryDeletedResponse,
    response_model_exclude_none=True,
)
def delete_repository(repo: str, gateway: ForgeGateway = Depends(get_gateway)):
    return RepositoryDeletedResponse.from_deleted(gateway.delete_repository(repo))


@router.delete(
    "/repositories/{owner}/{repo}",
    response_model=RepositoryDeletedResponse,
    response_model_exclude_none=True,
)
def delete_owned_repository(
    owner: str, repo: str, gateway: ForgeGateway = Depends(get_gateway)
):
    return RepositoryDeletedResponse.from_deleted(gateway.delete_repository(repo, owner=owner))


@router.get("/repositories/{repo}/pull-requests", response_model=list[PullRequestSummary])
def list_open_pull_requests(
    repo: str,
    limit: str = Query(default="0"),
    gateway: ForgeGateway = Depends(get_gateway),
):
    pulls = gateway.list_open_pull_requests(repo, limit=limit)
    return [PullRequestSummary.from_pull_request(p) for p in pulls]


@router.get(
    "/repositories/{owner}/{repo}/pull-requests",
    response_model=list[PullRequestSummary],
)
def list_owned_open_pull_requests(
    owner: str,
    repo: str,
    limit: str = Query(default="0"),
    gateway: ForgeGateway = Depends(get_gateway),
):
    pulls = gateway.list_open_pull_requests(repo, limit=limit, owner=owner)
    return [PullRequestSummary.from_pull_request(p) for p in pulls]


@router.get("/health")
def health(request: Request):
    settings = request.app.state.settings
    return {
        "status": "ok",
        "auth_mode": settings.auth_mode,
        "backend": settings.gateway_backend,
    }

"""repo-gateway infrastructure layer — upstream gateways.

All communication with the code host goes through this package.  Use
:func:`~infra.factory.build_gateway_provider` to obtain gateways for requests.

Quick start::

    from infra import GitHubGateway, InMemoryGateway

    with GitHubGateway(token="ghp_...", owner="octocat") as gateway:
        gateway.create_repository("hello-world", description="test repository")

    double = InMemoryGateway()
    double.create_repository("hello-world")
"""

from infra.factory import (
    GatewayProvider,
    PerRequestGitHubProvider,
    SharedGatewayProvider,
    build_gateway_provider,
)
from infra.forge import (
    CreatedRepository,
    DeletedRepository,
    ForgeError,
    ForgeGateway,
    PullRequest,
    Repository,
    RepositoryNotFoundError,
)
from infra.github_client import GitHubGateway
from infra.memory_client import InMemoryGateway
from infra.seed import load_seed

__all__ = [
    # Protocol & models
    "ForgeGateway",
    "ForgeError",
    "RepositoryNotFoundError",
    "Repository",
    "CreatedRepository",
    "DeletedRepository",
    "PullRequest",
    # Gateways
    "GitHubGateway",
    "InMemoryGateway",
    "load_seed",
    # Factory
    "GatewayProvider",
    "SharedGatewayProvider",
    "PerRequestGitHubProvider",
    "build_gateway_provider",
]

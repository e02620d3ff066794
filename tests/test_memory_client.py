"""Tests for infra.memory_client — the in-memory gateway double."""

from __future__ import annotations

import threading

import pytest

from app.core.errors import InvalidRequestError
from infra.forge import ForgeError, PullRequest, Repository, RepositoryNotFoundError
from infra.memory_client import InMemoryGateway


def _gateway(**kwargs) -> InMemoryGateway:
    return InMemoryGateway(
        repositories=[
            Repository(name="test-repo", description="test repo"),
            Repository(name="hello-world", description="test repo", private=True),
            Repository(name="third"),
        ],
        pull_requests=[
            PullRequest(number=1, title="one", base_repository_name="test-repo"),
            PullRequest(number=2, title="two", base_repository_name="test-repo"),
            PullRequest(number=5, title="other", base_repository_name="hello-world"),
            PullRequest(number=3, title="three", base_repository_name="test-repo"),
            PullRequest(number=4, title="closed", state="closed", base_repository_name="test-repo"),
        ],
        **kwargs,
    )


class TestCreate:
    def test_create_appends_and_echoes(self):
        gateway = InMemoryGateway()
        created = gateway.create_repository("hello-world", "test repository", False)
        assert created.name == "hello-world"
        assert created.description == "test repository"
        assert created.private is False
        assert [r.name for r in gateway.repositories] == ["hello-world"]

    def test_create_does_not_fabricate_upstream_fields(self):
        created = InMemoryGateway().create_repository("hello-world")
        assert created.id is None
        assert created.full_name is None
        assert created.html_url is None
        assert created.created_at is None

    def test_create_forwards_empty_name(self):
        gateway = InMemoryGateway()
        gateway.create_repository("")
        assert len(gateway.repositories) == 1

    def test_failure_leaves_collection_unchanged(self):
        gateway = _gateway(fail_with="github api error")
        with pytest.raises(ForgeError) as exc_info:
            gateway.create_repository("new-repo")
        assert exc_info.value.message == "github api error"
        assert len(gateway.repositories) == 3

    def test_duplicate_name_fails_and_keeps_first(self):
        gateway = InMemoryGateway()
        gateway.create_repository("a", "first")
        with pytest.raises(ForgeError) as exc_info:
            gateway.create_repository("a", "second")
        assert exc_info.value.message == "name already exists on this account"
        assert not isinstance(exc_info.value, RepositoryNotFoundError)
        assert gateway.repositories == [Repository(name="a", description="first")]


class TestList:
    def test_list_in_insertion_order(self):
        assert [r.name for r in _gateway().list_repositories()] == ["test-repo", "hello-world", "third"]

    def test_list_returns_copy(self):
        gateway = _gateway()
        listed = gateway.list_repositories()
        listed.clear()
        assert len(gateway.repositories) == 3

    def test_list_failure(self):
        with pytest.raises(ForgeError):
            _gateway(fail_with="boom").list_repositories()


class TestDelete:
    def test_delete_removes_exactly_one(self):
        gateway = _gateway()
        deleted = gateway.delete_repository("hello-world")
        assert deleted.message == "Repository successfully deleted"
        assert [r.name for r in gateway.repositories] == ["test-repo", "third"]

    def test_delete_absent_is_not_found_and_unchanged(self):
        gateway = _gateway()
        before = gateway.repositories
        with pytest.raises(RepositoryNotFoundError) as exc_info:
            gateway.delete_repository("missing")
        assert exc_info.value.message == "Repository not found"
        assert exc_info.value.status_code == 404
        assert gateway.repositories == before

    def test_upstream_failure_is_not_not_found(self):
        gateway = _gateway(fail_with="bad credentials")
        with pytest.raises(ForgeError) as exc_info:
            gateway.delete_repository("hello-world")
        assert not isinstance(exc_info.value, RepositoryNotFoundError)
        assert len(gateway.repositories) == 3

    def test_delete_with_matching_owner(self):
        gateway = _gateway(owner="octocat")
        deleted = gateway.delete_repository("third", owner="octocat")
        assert deleted.owner == "octocat"

    def test_delete_with_other_owner_not_found(self):
        gateway = _gateway(owner="octocat")
        with pytest.raises(RepositoryNotFoundError):
            gateway.delete_repository("third", owner="someone-else")
        assert len(gateway.repositories) == 3


class TestPullRequests:
    def test_only_open_for_repo(self):
        pulls = _gateway().list_open_pull_requests("test-repo")
        assert [p.number for p in pulls] == [1, 2, 3]

    def test_limit_truncates_preserving_order(self):
        pulls = _gateway().list_open_pull_requests("test-repo", limit="2")
        assert [p.number for p in pulls] == [1, 2]

    @pytest.mark.parametrize("limit,expected", [(1, 1), (3, 3), (10, 3), (0, 3)])
    def test_length_is_min_of_limit_and_total(self, limit, expected):
        assert len(_gateway().list_open_pull_requests("test-repo", limit=limit)) == expected

    def test_zero_pull_requests_is_empty_success(self):
        assert _gateway().list_open_pull_requests("third") == []

    def test_missing_repo_names_it(self):
        with pytest.raises(RepositoryNotFoundError) as exc_info:
            _gateway().list_open_pull_requests("nope")
        assert exc_info.value.message == "Repository 'nope' does not exist"

    @pytest.mark.parametrize("limit", ["-1", "abc", "2.0"])
    def test_invalid_limit_checked_first(self, limit):
        # Even a missing repository yields the limit error: no lookup happened.
        with pytest.raises(InvalidRequestError) as exc_info:
            _gateway().list_open_pull_requests("nope", limit=limit)
        assert exc_info.value.message == "Invalid limit value"

    def test_pull_requests_added_later(self):
        gateway = _gateway()
        gateway.add_pull_request(PullRequest(number=9, base_repository_name="third"))
        assert [p.number for p in gateway.list_open_pull_requests("third")] == [9]


class TestConcurrency:
    def test_concurrent_creates_and_deletes(self):
        gateway = InMemoryGateway(repositories=[Repository(name=f"old-{i}") for i in range(50)])

        def create(i: int) -> None:
            gateway.create_repository(f"new-{i}")

        def delete(i: int) -> None:
            gateway.delete_repository(f"old-{i}")

        threads = [threading.Thread(target=create, args=(i,)) for i in range(50)]
        threads += [threading.Thread(target=delete, args=(i,)) for i in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        names = {r.name for r in gateway.repositories}
        assert names == {f"new-{i}" for i in range(50)}

"""
Pytest fixtures for cherry-picker testing.

Provides mock collaborators and synthetic histories for each way a pull
request can be merged.
"""

from collections.abc import Iterable, Sequence
from typing import Any, Generator

import pytest

from cherrypicker.cherrypicker import CherryPickerOptions
from cherrypicker.testing.mock import MockGateway, MockLocalRepository
from cherrypicker.types.commits import Commit, CommitFile
from cherrypicker.types.pulls import PullRequest

TEST_OWNER = "mattermost"
TEST_REPO = "mattermost-server"
BASE_SHA = "base000"


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_commit(
    sha: str,
    parents: Sequence[str] = (),
    files: Iterable[tuple[str, str]] = (),
    **kwargs: Any,
) -> Commit:
    """
    Create a Commit from (filename, blob SHA) pairs.

    Args:
        sha: Commit SHA
        parents: Parent SHAs, first parent first
        files: Changed files as (filename, blob SHA) pairs
        **kwargs: Additional fields to override

    Returns:
        Commit object
    """
    return Commit(
        sha=sha,
        parents=tuple(parents),
        files=tuple(CommitFile(filename=name, sha=blob) for name, blob in files),
        **kwargs,
    )


def create_mock_pull_request(
    number: int = 100,
    merge_commit_sha: str | None = "abc123",
    head_commits: Sequence[Commit] = (),
    **kwargs: Any,
) -> PullRequest:
    """
    Create a PullRequest with customizable fields.

    Args:
        number: Pull request number
        merge_commit_sha: Where the PR landed, None for an unmerged PR
        head_commits: Authored commits, oldest first
        **kwargs: Additional fields to override

    Returns:
        PullRequest object
    """
    defaults = {
        "owner": TEST_OWNER,
        "repo_name": TEST_REPO,
        "username": "test-author",
        "base_branch": "master",
        "head_ref": f"feature-{number}",
        "merged": merge_commit_sha is not None,
        "url": f"https://github.com/{TEST_OWNER}/{TEST_REPO}/pull/{number}",
    }
    defaults.update(kwargs)
    return PullRequest(
        number=number,
        merge_commit_sha=merge_commit_sha,
        head_commits=tuple(head_commits),
        **defaults,
    )


def build_linear_history(
    file_sets: Sequence[Iterable[tuple[str, str]]],
    sha_prefix: str = "commit",
    base_sha: str | None = BASE_SHA,
) -> list[Commit]:
    """
    Build a chain of single-parent commits, oldest first.

    Commit ``i`` is named ``f"{sha_prefix}{i + 1}"``, changes ``file_sets[i]``
    and has the previous commit as its only parent. The first commit's
    parent is ``base_sha``, or none when ``base_sha`` is None.

    Example:
        ```python
        history = build_linear_history([[("a.go", "a1")], [("b.go", "b1")]], "br")
        assert [c.sha for c in history] == ["br1", "br2"]
        assert history[1].parents == ("br1",)
        ```
    """
    commits: list[Commit] = []
    parent = base_sha
    for index, files in enumerate(file_sets):
        sha = f"{sha_prefix}{index + 1}"
        commits.append(create_mock_commit(sha, parents=(parent,) if parent else (), files=files))
        parent = sha
    return commits


def create_base_commit(sha: str = BASE_SHA) -> Commit:
    """Create the root commit every synthetic history grows from."""
    return create_mock_commit(sha, files=[("README.md", "readme0")])


# ============================================================================
# Mock Collaborator Fixtures
# ============================================================================


@pytest.fixture
def mock_gateway() -> Generator[MockGateway, None, None]:
    """
    Provide a MockGateway holding the base commit.

    Example:
        ```python
        def test_my_feature(mock_gateway):
            mock_gateway.add_pull_request(my_pr)
            result = my_function(mock_gateway)
            assert mock_gateway.was_called("get_pull_request")
        ```
    """
    gateway = MockGateway()
    gateway.add_commits(create_base_commit())
    yield gateway
    gateway.reset()


@pytest.fixture
def mock_repository() -> MockLocalRepository:
    """Provide a MockLocalRepository with master and release-6.0 branches."""
    return MockLocalRepository(branches=["master", "release-6.0"])


@pytest.fixture
def cherry_picker_options() -> CherryPickerOptions:
    """Provide options targeting the test repository."""
    return CherryPickerOptions(repo_owner=TEST_OWNER, repo_name=TEST_REPO)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def squash_merged_pr() -> PullRequest:
    """
    Provide PR #100, squashed into ``abc123``.

    The squash commit changes the union of both authored commits, so it
    does not fingerprint like the last one.
    """
    head_commits = build_linear_history(
        [[("app.go", "app1"), ("util.go", "util1")], [("app.go", "app2")]],
        sha_prefix="pr100-",
        base_sha="fork100",
    )
    return create_mock_pull_request(number=100, merge_commit_sha="abc123", head_commits=head_commits)


@pytest.fixture
def rebase_merged_pr() -> PullRequest:
    """Provide PR #200 with three commits, rebased onto the branch as br1..br3."""
    head_commits = build_linear_history(
        [[("a.go", "f1")], [("b.go", "f2")], [("c.go", "f3")]],
        sha_prefix="pr200-",
        base_sha="fork200",
    )
    return create_mock_pull_request(number=200, merge_commit_sha="br3", head_commits=head_commits)


@pytest.fixture
def merge_committed_pr() -> PullRequest:
    """Provide PR #300, landed as merge commit ``merge300`` whose parent #1 is the PR side."""
    head_commits = build_linear_history(
        [[("api.go", "api1")], [("api.go", "api2"), ("api_test.go", "test1")]],
        sha_prefix="pr300-",
    )
    return create_mock_pull_request(number=300, merge_commit_sha="merge300", head_commits=head_commits)


# ============================================================================
# Configured Mock Gateway Fixtures
# ============================================================================


@pytest.fixture
def mock_gateway_with_squash_pr(
    mock_gateway: MockGateway,
    squash_merged_pr: PullRequest,
) -> MockGateway:
    """Provide a MockGateway serving a squash-merged PR #100."""
    mock_gateway.add_pull_request(squash_merged_pr)
    mock_gateway.add_commits(create_mock_commit(
        "abc123",
        parents=(BASE_SHA,),
        files=[("app.go", "app2"), ("util.go", "util1")],
    ))
    return mock_gateway


@pytest.fixture
def mock_gateway_with_rebase_pr(
    mock_gateway: MockGateway,
    rebase_merged_pr: PullRequest,
) -> MockGateway:
    """Provide a MockGateway serving a rebase-merged PR #200."""
    mock_gateway.add_pull_request(rebase_merged_pr)
    mock_gateway.add_commits(*build_linear_history(
        [[("a.go", "f1")], [("b.go", "f2")], [("c.go", "f3")]],
        sha_prefix="br",
    ))
    return mock_gateway


@pytest.fixture
def mock_gateway_with_merge_pr(
    mock_gateway: MockGateway,
    merge_committed_pr: PullRequest,
) -> MockGateway:
    """Provide a MockGateway serving a merge-committed PR #300."""
    mock_gateway.add_pull_request(merge_committed_pr)
    last = merge_committed_pr.last_commit
    mock_gateway.add_commits(create_mock_commit(
        "merge300",
        parents=(BASE_SHA, last.sha),
        files=[("api.go", "api2"), ("api_test.go", "test1")],
    ))
    return mock_gateway

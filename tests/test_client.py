"""
Tests for the GitHub repository gateway.

Feature: cherrypicker
"""

import json

import httpx
import pytest

from cherrypicker.cherrypicker import CherryPicker, CherryPickerOptions
from cherrypicker.client import GitHubClient
from cherrypicker.exceptions import CherryPickFailedError, NotFoundError, ServerError, ValidationError
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.testing import MockLocalRepository
from cherrypicker.types import Commit, CommitFile

PULL_REQUEST = {
    "number": 18746,
    "html_url": "https://github.com/mattermost/mattermost-server/pull/18746",
    "merged": True,
    "merge_commit_sha": "f68ba02e",
    "user": {"login": "octocat"},
    "head": {"ref": "MM-123-fix"},
    "base": {
        "ref": "master",
        "repo": {"name": "mattermost-server", "owner": {"login": "mattermost"}},
    },
}


def _commit_json(sha: str, parents: list[str], files: list[tuple[str, str | None]]) -> dict:
    return {
        "sha": sha,
        "commit": {"tree": {"sha": f"tree-{sha}"}},
        "parents": [{"sha": p} for p in parents],
        "files": [{"filename": name, "sha": blob} for name, blob in files],
    }


def _mock_github(client: GitHubClient, routes: dict[tuple[str, str], httpx.Response], seen: list | None = None):
    """Serve canned responses keyed by (method, path)."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        key = (request.method, request.url.path)
        if key not in routes:
            return httpx.Response(404, json={"message": "Not Found"})
        return routes[key]

    transport = client.transport
    headers = transport._client.headers
    transport._client.close()
    transport._client = httpx.Client(
        base_url=transport.base_url,
        headers=headers,
        transport=httpx.MockTransport(handler),
    )


def test_client_initialization() -> None:
    """Test that GitHubClient initializes correctly."""
    client = GitHubClient(token="ghp_test", base_url="https://github.example.com/api/v3", timeout=10.0)

    assert isinstance(client, RepositoryGateway)
    assert client.base_url == "https://github.example.com/api/v3"
    assert client.timeout == 10.0
    assert client.pulls is not None
    assert client.commits is not None
    assert client.transport.authenticated

    client.close()


def test_client_default_values() -> None:
    with GitHubClient() as client:
        assert client.base_url == "https://api.github.com"
        assert client.timeout == 30.0
        assert not client.transport.authenticated


def test_client_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_from_env")
    monkeypatch.setenv("GITHUB_API_URL", "https://github.example.com/api/v3")

    with GitHubClient.from_env() as client:
        assert client.base_url == "https://github.example.com/api/v3"
        assert client.transport._client.headers["Authorization"] == "Bearer ghp_from_env"


def test_client_from_env_without_token(monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_API_URL", raising=False)

    with GitHubClient.from_env() as client:
        assert client.base_url == "https://api.github.com"
        assert not client.transport.authenticated


def test_get_pull_request_parses_fields() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/mattermost/mattermost-server/pulls/18746"): httpx.Response(200, json=PULL_REQUEST),
    })

    pr = client.get_pull_request("mattermost", "mattermost-server", 18746)

    assert pr.owner == "mattermost"
    assert pr.repo_name == "mattermost-server"
    assert pr.number == 18746
    assert pr.merge_commit_sha == "f68ba02e"
    assert pr.username == "octocat"
    assert pr.base_branch == "master"
    assert pr.head_ref == "MM-123-fix"
    assert pr.merged is True
    assert pr.head_commits == ()


def test_get_pull_request_not_found() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {})

    with pytest.raises(NotFoundError):
        client.get_pull_request("mattermost", "mattermost-server", 1)


def test_get_commit_parses_parents_and_files() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/mattermost/mattermost-server/commits/merge1"): httpx.Response(
            200,
            json=_commit_json("merge1", ["p1", "p2"], [("app.go", "blob1"), ("gone.go", None)]),
        ),
    })

    commit = client.get_commit("mattermost", "mattermost-server", "merge1")

    assert commit == Commit(
        sha="merge1",
        parents=("p1", "p2"),
        files=(CommitFile("app.go", "blob1"), CommitFile("gone.go", "")),
        tree_sha="tree-merge1",
    )
    assert commit.is_merge


def test_get_commit_empty_body_is_not_found() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/o/r/commits/abc"): httpx.Response(200, json={}),
    })

    with pytest.raises(NotFoundError):
        client.get_commit("o", "r", "abc")


def test_list_pr_commits_fetches_each_commit_in_order() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/o/r/pulls/7/commits"): httpx.Response(
            200, json=[{"sha": "c1"}, {"sha": "c2"}],
        ),
        ("GET", "/repos/o/r/commits/c1"): httpx.Response(
            200, json=_commit_json("c1", ["base"], [("a.go", "a1")]),
        ),
        ("GET", "/repos/o/r/commits/c2"): httpx.Response(
            200, json=_commit_json("c2", ["c1"], [("a.go", "a2")]),
        ),
    })

    commits = client.list_pr_commits("o", "r", 7)

    assert [c.sha for c in commits] == ["c1", "c2"]
    assert commits[1].files == (CommitFile("a.go", "a2"),)


def test_create_pull_request_posts_payload() -> None:
    client = GitHubClient(token="ghp_test")
    seen: list[httpx.Request] = []
    _mock_github(client, {
        ("POST", "/repos/o/r/pulls"): httpx.Response(
            201, json={"number": 42, "html_url": "https://github.com/o/r/pull/42"},
        ),
    }, seen)

    ref = client.create_pull_request(
        "o", "r",
        head="octocat:automated-cherry-pick-of-7-1700000000",
        base="release-6.0",
        title="Automated cherry pick of #7 on release-6.0",
        body="body",
    )

    assert ref.number == 42
    assert ref.url == "https://github.com/o/r/pull/42"
    assert ref.base == "release-6.0"

    payload = json.loads(seen[0].content)
    assert payload == {
        "title": "Automated cherry pick of #7 on release-6.0",
        "head": "octocat:automated-cherry-pick-of-7-1700000000",
        "base": "release-6.0",
        "body": "body",
        "maintainer_can_modify": True,
    }


def test_create_pull_request_validation_error() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("POST", "/repos/o/r/pulls"): httpx.Response(
            422,
            json={
                "message": "Validation Failed",
                "errors": [{"message": "A pull request already exists"}],
            },
        ),
    })

    with pytest.raises(ValidationError) as exc_info:
        client.create_pull_request("o", "r", "b", "main", "t", "b")

    assert "already exists" in str(exc_info.value)


def test_create_pull_request_is_not_resent_after_server_error() -> None:
    client = GitHubClient(token="ghp_test")
    seen: list[httpx.Request] = []
    _mock_github(client, {
        ("POST", "/repos/o/r/pulls"): httpx.Response(502, json={"message": "Bad Gateway"}),
    }, seen)

    with pytest.raises(ServerError):
        client.create_pull_request("o", "r", "b", "main", "t", "b")

    assert [request.method for request in seen] == ["POST"]


def test_get_commit_malformed_payload() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/o/r/commits/abc"): httpx.Response(200, json={"parents": [{"sha": "p1"}]}),
    })

    with pytest.raises(ServerError) as exc_info:
        client.get_commit("o", "r", "abc")

    assert exc_info.value.code == "INVALID_RESPONSE"
    assert isinstance(exc_info.value.__cause__, KeyError)


def test_get_pull_request_malformed_payload() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/o/r/pulls/7"): httpx.Response(200, json=[{"number": 7}]),
    })

    with pytest.raises(ServerError) as exc_info:
        client.get_pull_request("o", "r", 7)

    assert exc_info.value.code == "INVALID_RESPONSE"


def test_list_pr_commits_malformed_payload() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/o/r/pulls/7/commits"): httpx.Response(200, json=[{"node_id": "x"}]),
    })

    with pytest.raises(ServerError) as exc_info:
        client.list_pr_commits("o", "r", 7)

    assert exc_info.value.code == "INVALID_RESPONSE"


def test_html_response_fails_cherry_pick_run() -> None:
    client = GitHubClient(token="ghp_test")
    _mock_github(client, {
        ("GET", "/repos/o/r/pulls/1"): httpx.Response(
            200, text="<html>proxy</html>", headers={"Content-Type": "text/html"},
        ),
    })
    picker = CherryPicker(
        client,
        CherryPickerOptions(repo_owner="o", repo_name="r"),
        repository=MockLocalRepository(branches=["master", "rel"]),
    )

    with pytest.raises(CherryPickFailedError) as exc_info:
        picker.create_cherry_pick(1, "rel")

    assert exc_info.value.state == "fetching"
    assert isinstance(exc_info.value.__cause__, ServerError)
    assert exc_info.value.__cause__.code == "INVALID_RESPONSE"

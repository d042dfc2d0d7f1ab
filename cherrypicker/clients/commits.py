"""Commits resource client."""

from typing import TYPE_CHECKING, Any

from cherrypicker.exceptions import NotFoundError, ServerError
from cherrypicker.types.commits import Commit, CommitFile

if TYPE_CHECKING:
    from cherrypicker.transport import HTTPTransport


class CommitsClient:
    """Client for repository commit operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the commits client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get(self, owner: str, repo: str, sha: str) -> Commit:
        """
        Get a commit with its parents and changed files.

        Args:
            owner: Repository owner
            repo: Repository name
            sha: Commit SHA (or any ref GitHub resolves)

        Returns:
            Commit

        Raises:
            NotFoundError: If the commit does not exist or the response is empty
            ServerError: If the commit payload is malformed
        """
        data = self.transport.request(
            method="GET",
            path=f"/repos/{owner}/{repo}/commits/{sha}",
        )
        if not data:
            raise NotFoundError(
                "NOT_FOUND", f"commit returned empty when querying sha {sha}"
            )
        try:
            return parse_commit(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise ServerError(
                "INVALID_RESPONSE", f"malformed commit {sha} in response: {e!r}"
            ) from e


def parse_commit(data: dict[str, Any]) -> Commit:
    """Parse commit data from an API response."""
    tree = (data.get("commit") or {}).get("tree") or {}
    files = tuple(
        CommitFile(filename=f["filename"], sha=f.get("sha") or "")
        for f in data.get("files") or []
    )
    return Commit(
        sha=data["sha"],
        parents=tuple(p["sha"] for p in data.get("parents") or []),
        files=files,
        tree_sha=tree.get("sha"),
    )

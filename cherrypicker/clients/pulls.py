"""Pull requests resource client."""

from typing import TYPE_CHECKING, Any

from cherrypicker.exceptions import ServerError
from cherrypicker.types.pulls import PullRequest, PullRequestRef

if TYPE_CHECKING:
    from cherrypicker.transport import HTTPTransport


class PullsClient:
    """Client for pull request operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the pulls client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get(self, owner: str, repo: str, number: int) -> PullRequest:
        """
        Get pull request information.

        The returned PullRequest carries no head commits; those are listed
        separately with list_commit_shas().

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number

        Returns:
            PullRequest

        Raises:
            NotFoundError: If pull request not found
        """
        data = self.transport.request(
            method="GET",
            path=f"/repos/{owner}/{repo}/pulls/{number}",
        )
        try:
            return self._parse_pull_request(owner, repo, data)
        except (KeyError, TypeError, AttributeError) as e:
            raise _malformed(f"pull request #{number}", e) from e

    def list_commit_shas(self, owner: str, repo: str, number: int) -> list[str]:
        """
        List the SHAs of the commits authored in a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number

        Returns:
            Commit SHAs, oldest first
        """
        commits = self.transport.get_paginated(
            f"/repos/{owner}/{repo}/pulls/{number}/commits"
        )
        try:
            return [c["sha"] for c in commits]
        except (KeyError, TypeError) as e:
            raise _malformed(f"commit list of pull request #{number}", e) from e

    def create(
        self,
        owner: str,
        repo: str,
        head: str,
        base: str,
        title: str,
        body: str,
        maintainer_can_modify: bool = True,
    ) -> PullRequestRef:
        """
        Create a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            head: Branch containing changes ("user:branch" for forks)
            base: Branch to merge into
            title: Pull request title
            body: Pull request description
            maintainer_can_modify: Allow maintainers to push to the head branch

        Returns:
            PullRequestRef of the new pull request

        Raises:
            ValidationError: If the branches are invalid or a PR already exists
            NotFoundError: If repository not found
        """
        data = self.transport.request(
            method="POST",
            path=f"/repos/{owner}/{repo}/pulls",
            retry=False,
            body={
                "title": title,
                "head": head,
                "base": base,
                "body": body,
                "maintainer_can_modify": maintainer_can_modify,
            },
        )
        try:
            return PullRequestRef(
                owner=owner,
                repo_name=repo,
                number=data["number"],
                url=data.get("html_url") or data.get("url", ""),
                head=head,
                base=base,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise _malformed("created pull request", e) from e

    def _parse_pull_request(
        self, owner: str, repo: str, data: dict[str, Any]
    ) -> PullRequest:
        """Parse pull request data from API response."""
        base = data.get("base") or {}
        base_repo = base.get("repo") or {}
        return PullRequest(
            owner=(base_repo.get("owner") or {}).get("login", owner),
            repo_name=base_repo.get("name", repo),
            number=data["number"],
            merge_commit_sha=data.get("merge_commit_sha"),
            username=(data.get("user") or {}).get("login", ""),
            base_branch=base.get("ref", ""),
            head_ref=(data.get("head") or {}).get("ref", ""),
            merged=bool(data.get("merged", False)),
            url=data.get("html_url"),
        )


def _malformed(what: str, error: Exception) -> ServerError:
    return ServerError("INVALID_RESPONSE", f"malformed {what} in response: {error!r}")

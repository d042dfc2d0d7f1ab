"""
GitHub client.

Provides the GitHub REST implementation of the repository gateway.
"""

import os
from typing import Any

from cherrypicker.clients import CommitsClient, PullsClient
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.logging import get_logger
from cherrypicker.transport import HTTPTransport, RetryConfig
from cherrypicker.types.commits import Commit
from cherrypicker.types.pulls import PullRequest, PullRequestRef

logger = get_logger()


class GitHubClient(RepositoryGateway):
    """
    Repository gateway backed by the GitHub REST API.

    Aggregates the resource clients and shares one HTTP transport between
    them. A single instance is meant to be passed to every component that
    needs to reach GitHub.

    Example:
        ```python
        from cherrypicker import GitHubClient

        with GitHubClient.from_env() as github:
            pr = github.get_pull_request("mattermost", "mattermost-server", 18746)
            print(pr.merge_commit_sha)
        ```
    """

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize the GitHub client.

        Args:
            token: GitHub token (optional, anonymous access when omitted)
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.pulls = PullsClient(self._transport)
        self.commits = CommitsClient(self._transport)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "GitHubClient":
        """
        Create a client from environment variables.

        Environment variables:
            GITHUB_TOKEN: Token used to authenticate (optional)
            GITHUB_API_URL: Base URL for API (optional, default: https://api.github.com)

        Args:
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)

        Returns:
            Configured GitHubClient instance
        """
        return cls(
            token=os.environ.get("GITHUB_TOKEN") or None,
            base_url=os.environ.get("GITHUB_API_URL", cls.DEFAULT_BASE_URL),
            timeout=timeout,
            retry_config=retry_config,
        )

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        return self.pulls.get(owner, repo, number)

    def get_commit(self, owner: str, repo: str, sha: str) -> Commit:
        return self.commits.get(owner, repo, sha)

    def list_pr_commits(self, owner: str, repo: str, number: int) -> list[Commit]:
        # The list endpoint omits changed files, so each commit is fetched
        shas = self.pulls.list_commit_shas(owner, repo, number)
        commits = [self.commits.get(owner, repo, sha) for sha in shas]
        logger.info("Read %d commits from PR #%d", len(commits), number)
        return commits

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        head: str,
        base: str,
        title: str,
        body: str,
        maintainer_can_modify: bool = True,
    ) -> PullRequestRef:
        return self.pulls.create(
            owner, repo, head, base, title, body,
            maintainer_can_modify=maintainer_can_modify,
        )

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "GitHubClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()

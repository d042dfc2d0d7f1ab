"""
Local repository adapter.

Runs branch, cherry-pick and push operations against a local working tree
by shelling out to the git CLI.
"""

import re
import subprocess
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from cherrypicker.exceptions import ConfigurationError, GitCommandError
from cherrypicker.logging import get_logger, log_git_command, mask_sensitive_data

logger = get_logger("git")

GIT_COMMAND = "git"
GITHUB_URL_TEMPLATE = "git@github.com:{owner}/{name}"

# Files in the git directory whose presence means a history operation is underway
IN_PROGRESS_MARKERS = (
    "rebase-apply",
    "rebase-merge",
    "MERGE_HEAD",
    "CHERRY_PICK_HEAD",
)

# Porcelain v1 XY codes of unmerged paths
UNMERGED_STATUS_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

# Owner and repository components at the end of a clone URL
_OWNER_IN_URL = re.compile(r"([:/])[^/:]+/([^/]+)$")

MERGE_STRATEGIES: dict[str, list[str]] = {
    "recursive-theirs": ["--strategy=recursive", "-X", "theirs"],
    "recursive-ours": ["--strategy=recursive", "-X", "ours"],
}


def github_url(owner: str, name: str) -> str:
    """Return the SSH clone URL of a GitHub repository."""
    return GITHUB_URL_TEMPLATE.format(owner=owner, name=name)


def fork_remote_url(url: str, fork_owner: str) -> str:
    """
    Return the URL of a fork given the URL of the main repository.

    Works for both SSH (git@github.com:owner/name) and HTTPS URLs.
    """
    match = _OWNER_IN_URL.search(url)
    if match is None:
        raise ConfigurationError(f"Unable to derive fork URL from remote URL {url}")
    return f"{url[:match.start()]}{match.group(1)}{fork_owner}/{match.group(2)}"


def parse_conflicts(status: str) -> list[str]:
    """
    Extract unmerged paths from `git status --porcelain` output.

    Args:
        status: Raw porcelain status output

    Returns:
        Paths with unresolved conflicts, in status order
    """
    files = []
    for line in status.splitlines():
        if len(line) < 4:
            continue
        code = line[:2]
        if code in UNMERGED_STATUS_CODES or code.startswith("U"):
            files.append(line[3:])
    return files


@dataclass(frozen=True)
class CherryPickOptions:
    """Options applied to a `git cherry-pick` invocation."""

    mainline: int | None = None  # 1-based parent number for merge commits
    merge_strategy: str | None = None  # "recursive-theirs" or "recursive-ours"

    def __post_init__(self) -> None:
        if self.merge_strategy is not None and self.merge_strategy not in MERGE_STRATEGIES:
            raise ConfigurationError(
                f"Invalid merge strategy: {self.merge_strategy}. "
                f"Must be one of {', '.join(sorted(MERGE_STRATEGIES))}"
            )
        if self.mainline is not None and self.mainline < 1:
            raise ConfigurationError(
                f"Invalid mainline parent number {self.mainline}, parents are numbered from 1"
            )

    def to_args(self) -> list[str]:
        """Render the options as git command line arguments."""
        args: list[str] = []
        if self.merge_strategy is not None:
            args.extend(MERGE_STRATEGIES[self.merge_strategy])
        if self.mainline is not None:
            args.extend(["-m", str(self.mainline)])
        return args


class LocalRepositoryAdapter(ABC):
    """Abstract base class for operations on a local working tree."""

    @abstractmethod
    def rebase_in_progress(self) -> bool:
        """Return True if a rebase, merge or cherry-pick is underway."""
        pass

    @abstractmethod
    def create_branch(self, name: str) -> None:
        """Create a branch at the current HEAD."""
        pass

    @abstractmethod
    def checkout(self, ref: str) -> None:
        """Check out a branch."""
        pass

    @abstractmethod
    def cherry_pick(
        self, shas: Sequence[str], options: CherryPickOptions | None = None
    ) -> None:
        """Cherry-pick commits, in order, onto the checked out branch."""
        pass

    @abstractmethod
    def has_conflicts(self) -> tuple[bool, list[str]]:
        """Return whether unmerged paths exist, and which."""
        pass

    @abstractmethod
    def push(self, branch: str, remote: str | None = None) -> None:
        """Push a branch to a remote."""
        pass

    @abstractmethod
    def add_remote(self, name: str, url: str) -> None:
        """Register a new remote."""
        pass

    @abstractmethod
    def remote_url(self, name: str) -> str | None:
        """Return the URL of a remote, or None if it does not exist."""
        pass

    @abstractmethod
    def main_remote_url(self) -> str:
        """Return the URL of `upstream`, falling back to `origin`."""
        pass


class LocalRepository(LocalRepositoryAdapter):
    """
    Git working tree driven through the git CLI.

    Example:
        ```python
        from cherrypicker.git import CherryPickOptions, LocalRepository

        repo = LocalRepository.open("./mattermost-server")
        repo.checkout("release-6.0")
        repo.create_branch("my-cherry-pick")
        repo.checkout("my-cherry-pick")
        repo.cherry_pick(["f68ba02e"], CherryPickOptions(merge_strategy="recursive-theirs"))
        ```
    """

    def __init__(self, path: str | Path, default_remote: str = "origin") -> None:
        """
        Initialize the adapter.

        Args:
            path: Root of the working tree
            default_remote: Remote used by push() when none is given
        """
        self.path = Path(path)
        self.default_remote = default_remote

    @classmethod
    def open(cls, path: str | Path, default_remote: str = "origin") -> "LocalRepository":
        """
        Open an existing working tree.

        Raises:
            GitCommandError: If the path is not inside a git repository
        """
        repo = cls(path, default_remote)
        repo._run("rev-parse", "--git-dir")
        return repo

    @classmethod
    def clone(
        cls,
        url: str,
        path: str | Path | None = None,
        default_remote: str = "origin",
    ) -> "LocalRepository":
        """
        Clone a repository.

        Args:
            url: Clone URL
            path: Destination directory; a temporary directory when None
            default_remote: Remote used by push() when none is given

        Returns:
            LocalRepository for the new clone
        """
        if path is None:
            path = tempfile.mkdtemp(prefix="git-repo-tmpclone-")
        logger.info("Cloning %s to %s", mask_sensitive_data(url), path)
        _run_git([GIT_COMMAND, "clone", url, str(path)])
        return cls(path, default_remote)

    def rebase_in_progress(self) -> bool:
        # Relative to the working directory, or absolute in linked worktrees
        git_dir = self.path / self._run("rev-parse", "--git-dir").stdout.strip()
        return any((git_dir / marker).exists() for marker in IN_PROGRESS_MARKERS)

    def create_branch(self, name: str) -> None:
        logger.info("Creating branch %s", name)
        self._run("branch", name)

    def checkout(self, ref: str) -> None:
        logger.info("Checking out %s", ref)
        self._run("checkout", ref)

    def cherry_pick(
        self, shas: Sequence[str], options: CherryPickOptions | None = None
    ) -> None:
        options = options or CherryPickOptions()
        logger.info("Cherry picking %d commit(s): %s", len(shas), " ".join(shas))
        self._run("cherry-pick", *options.to_args(), *shas)

    def status(self) -> str:
        """Return raw `git status --porcelain` output."""
        return self._run("status", "--porcelain").stdout

    def has_conflicts(self) -> tuple[bool, list[str]]:
        files = parse_conflicts(self.status())
        if files:
            logger.info("Conflicts detected in %d file(s): %s", len(files), ", ".join(files))
        return bool(files), files

    def push(self, branch: str, remote: str | None = None) -> None:
        if not remote:
            remote = self.default_remote
            logger.info("Using default remote %s for push", remote)
        logger.info("Pushing branch %s to %s", branch, remote)
        self._run("push", remote, branch)

    def add_remote(self, name: str, url: str) -> None:
        logger.info("Adding remote %s", name)
        self._run("remote", "add", name, url)

    def remote_url(self, name: str) -> str | None:
        result = self._run("remote", "get-url", name, check=False)
        if result.returncode == 0:
            return result.stdout.strip()
        if "No such remote" in result.stderr:
            return None
        raise GitCommandError(
            [GIT_COMMAND, "remote", "get-url", name], result.returncode, result.stderr
        )

    def main_remote_url(self) -> str:
        url = self.remote_url("upstream") or self.remote_url("origin")
        if url is None:
            raise GitCommandError(
                [GIT_COMMAND, "remote", "get-url", "origin"], 2,
                "neither upstream nor origin remote is defined",
            )
        return url

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git subcommand in the working tree."""
        return _run_git([GIT_COMMAND, *args], cwd=self.path, check=check)


def _run_git(
    cmd: list[str], cwd: Path | None = None, check: bool = True
) -> subprocess.CompletedProcess[str]:
    log_git_command(cmd, str(cwd) if cwd else None)
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=check,
        )
    except subprocess.CalledProcessError as e:
        raise GitCommandError(cmd, e.returncode, e.stderr) from e

"""
Cherry-pick orchestration.

Reproduces a merged pull request on another branch and opens a new pull
request with the result, whatever way the original was merged.
"""

import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from cherrypicker.classifier import MergeModeClassifier
from cherrypicker.exceptions import (
    CherryPickCancelledError,
    CherryPickConflictError,
    CherryPickerError,
    CherryPickFailedError,
    ConfigurationError,
    GitCommandError,
    InvalidMergeCommitError,
    RebaseInProgressError,
)
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.git import (
    MERGE_STRATEGIES,
    CherryPickOptions,
    LocalRepository,
    LocalRepositoryAdapter,
    fork_remote_url,
    github_url,
)
from cherrypicker.logging import get_logger
from cherrypicker.patch_tree import PatchTreeResolver
from cherrypicker.rebase import RebaseSequenceReconstructor
from cherrypicker.types.pulls import PullRequest, PullRequestRef
from cherrypicker.types.replay import CherryPickRun, MergeMode, ReplaySpec, RunState

logger = get_logger()

NEW_BRANCH_SLUG = "automated-cherry-pick-of-"
PR_TITLE_TEMPLATE = "Automated cherry pick of #{number} on {branch}"
PR_BODY_TEMPLATE = (
    "Automated cherry pick of #{number} on {branch}\n"
    "\n"
    "Cherry pick of #{number} on {branch}.\n"
    "\n"
    "/cc  @{username}\n"
    "\n"
    "```release-note\nNONE\n```\n"
)

# Human readable name of the work done when entering each state
_OPERATIONS = {
    RunState.INIT: "verifying environment",
    RunState.FETCHING: "fetching pull request",
    RunState.CLASSIFYING: "getting merge mode",
    RunState.BRANCH_CREATED: "creating the feature branch",
    RunState.REPLAYING: "cherry picking pull request",
    RunState.PUSHED: "pushing branch to git remote",
    RunState.PR_OPENED: "creating pull request in github",
}


@dataclass(frozen=True)
class CherryPickerOptions:
    """Configuration of a cherry-picker."""

    repo_owner: str
    repo_name: str
    repo_path: str | None = "."  # None clones into a temporary directory
    remote: str = "origin"
    fork_owner: str | None = None
    merge_strategy: str | None = None  # applied to every cherry-pick of a run

    def __post_init__(self) -> None:
        if not self.repo_owner or not self.repo_name:
            raise ConfigurationError("repository owner and name are required")
        if self.merge_strategy is not None and self.merge_strategy not in MERGE_STRATEGIES:
            raise ConfigurationError(
                f"Invalid merge strategy: {self.merge_strategy}. "
                f"Must be one of {', '.join(sorted(MERGE_STRATEGIES))}"
            )

    @classmethod
    def from_env(cls) -> "CherryPickerOptions":
        """
        Create options from environment variables.

        Environment variables:
            CHERRYPICKER_REPO_OWNER: Organization or user owning the repository (required)
            CHERRYPICKER_REPO_NAME: Repository name (required)
            CHERRYPICKER_REPO_PATH: Local clone (optional, default: ".", empty to clone)
            CHERRYPICKER_REMOTE: Remote to push to (optional, default: origin)
            CHERRYPICKER_FORK_OWNER: Push to this user's fork instead (optional)
            CHERRYPICKER_MERGE_STRATEGY: "recursive-theirs" or "recursive-ours" (optional)

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        owner = os.environ.get("CHERRYPICKER_REPO_OWNER")
        name = os.environ.get("CHERRYPICKER_REPO_NAME")

        if not owner:
            raise ConfigurationError("CHERRYPICKER_REPO_OWNER environment variable not set")
        if not name:
            raise ConfigurationError("CHERRYPICKER_REPO_NAME environment variable not set")

        return cls(
            repo_owner=owner,
            repo_name=name,
            repo_path=os.environ.get("CHERRYPICKER_REPO_PATH", ".") or None,
            remote=os.environ.get("CHERRYPICKER_REMOTE") or "origin",
            fork_owner=os.environ.get("CHERRYPICKER_FORK_OWNER") or None,
            merge_strategy=os.environ.get("CHERRYPICKER_MERGE_STRATEGY") or None,
        )


class CherryPicker:
    """
    Cherry-picks merged pull requests onto other branches.

    One call to create_cherry_pick() runs the whole pipeline: fetch the PR,
    classify how it was merged, branch off the target, replay, push and
    open a pull request. Runs must not overlap on the same working tree.

    Example:
        ```python
        from cherrypicker import CherryPicker, CherryPickerOptions, GitHubClient

        options = CherryPickerOptions(
            repo_owner="mattermost",
            repo_name="mattermost-server",
            repo_path="./mattermost-server",
        )
        with GitHubClient.from_env() as github:
            picker = CherryPicker(github, options)
            pr = picker.create_cherry_pick(18746, "release-6.0")
            print(pr.url)
        ```
    """

    def __init__(
        self,
        gateway: RepositoryGateway,
        options: CherryPickerOptions,
        repository: LocalRepositoryAdapter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the cherry-picker.

        Args:
            gateway: Gateway shared by every component that reaches GitHub
            options: Repository and push configuration
            repository: Local working tree; opened (or cloned) from options when None
            clock: Source of the timestamp in feature branch names
        """
        self.gateway = gateway
        self.options = options
        self.repository = repository
        self.classifier = MergeModeClassifier(gateway)
        self.patch_tree_resolver = PatchTreeResolver(gateway)
        self.rebase_reconstructor = RebaseSequenceReconstructor(gateway)
        self._clock = clock

    def create_cherry_pick(
        self,
        pr_number: int,
        branch: str,
        cancel_event: threading.Event | None = None,
    ) -> PullRequestRef:
        """
        Cherry-pick a merged pull request onto a branch and open a PR.

        Args:
            pr_number: Number of the merged pull request
            branch: Branch to cherry-pick onto
            cancel_event: Checked before each step; when set the run stops

        Returns:
            Reference to the newly opened pull request

        Raises:
            CherryPickFailedError: On any failure, chained to the cause. A
                feature branch created before the failure is left in place.
        """
        run = CherryPickRun(pr_number=pr_number, target_branch=branch)

        try:
            self._enter(run, RunState.INIT, cancel_event)
            repository = self._verify_environment()

            self._enter(run, RunState.FETCHING, cancel_event)
            pr = self._fetch_pull_request(pr_number)

            self._enter(run, RunState.CLASSIFYING, cancel_event)
            mode = self.classifier.classify(pr)

            self._enter(run, RunState.BRANCH_CREATED, cancel_event)
            feature_branch = self._create_branch(repository, run, pr)

            self._enter(run, RunState.REPLAYING, cancel_event)
            self._replay(repository, run, pr, mode, feature_branch)

            self._enter(run, RunState.PUSHED, cancel_event)
            head = self._push_feature_branch(repository, feature_branch)

            self._enter(run, RunState.PR_OPENED, cancel_event)
            run.pull_request = self._open_pull_request(run, pr, head)
        except (CherryPickerError, OSError) as e:
            failed_in = run.state
            run.state = RunState.FAILED
            raise CherryPickFailedError(
                state=failed_in.value,
                operation=_OPERATIONS.get(failed_in, failed_in.value),
                pr_number=pr_number,
                branch=branch,
                feature_branch=run.feature_branch,
                cause=e,
            ) from e

        run.state = RunState.DONE
        logger.info("Successfully created pull request #%d", run.pull_request.number)
        return run.pull_request

    def _enter(
        self,
        run: CherryPickRun,
        state: RunState,
        cancel_event: threading.Event | None,
    ) -> None:
        run.state = state
        if cancel_event is not None and cancel_event.is_set():
            raise CherryPickCancelledError(state.value, run.touched_working_tree)

    def _verify_environment(self) -> LocalRepositoryAdapter:
        if self.repository is None:
            self.repository = self._open_repository()

        if self.repository.rebase_in_progress():
            raise RebaseInProgressError(self.options.repo_path or ".")
        return self.repository

    def _open_repository(self) -> LocalRepository:
        if self.options.repo_path is None:
            logger.debug("Cloning %s/%s", self.options.repo_owner, self.options.repo_name)
            return LocalRepository.clone(
                github_url(self.options.repo_owner, self.options.repo_name),
                default_remote=self.options.remote,
            )
        return LocalRepository.open(self.options.repo_path, default_remote=self.options.remote)

    def _fetch_pull_request(self, pr_number: int) -> PullRequest:
        owner, name = self.options.repo_owner, self.options.repo_name
        pr = self.gateway.get_pull_request(owner, name, pr_number)
        commits = self.gateway.list_pr_commits(owner, name, pr_number)
        return pr.with_commits(commits)

    def _create_branch(
        self, repository: LocalRepositoryAdapter, run: CherryPickRun, pr: PullRequest
    ) -> str:
        # The timestamp keeps repeated runs for the same PR apart
        name = f"{NEW_BRANCH_SLUG}{pr.number}-{int(self._clock())}"

        # Switching to the target first ensures it exists and is our base
        repository.checkout(run.target_branch)
        repository.create_branch(name)
        run.feature_branch = name
        repository.checkout(name)
        logger.info("Created cherry-pick feature branch %s", name)
        return name

    def _resolve_replay(self, pr: PullRequest, mode: MergeMode) -> ReplaySpec:
        if mode == MergeMode.MERGE:
            return self.patch_tree_resolver.resolve(pr)

        if mode == MergeMode.REBASE:
            return self.rebase_reconstructor.resolve(pr)

        if not pr.merge_commit_sha:
            raise InvalidMergeCommitError(pr.number)
        return ReplaySpec(mode=MergeMode.SQUASH, commits=(pr.merge_commit_sha,))

    def _replay(
        self,
        repository: LocalRepositoryAdapter,
        run: CherryPickRun,
        pr: PullRequest,
        mode: MergeMode,
        feature_branch: str,
    ) -> None:
        replay = self._resolve_replay(pr, mode)
        run.replay = replay

        options = CherryPickOptions(
            mainline=replay.mainline_parent,
            merge_strategy=self.options.merge_strategy,
        )
        logger.info(
            "Cherry picking %d commit(s) of PR #%d (%s) to branch %s",
            len(replay.commits), pr.number, mode.value, feature_branch,
        )

        try:
            repository.cherry_pick(replay.commits, options)
        except GitCommandError as e:
            # A conflicted cherry-pick exits non-zero; report it as a conflict
            conflict = self._find_conflicts(repository, run, feature_branch, replay)
            if conflict is not None:
                raise conflict from e
            raise

        conflict = self._find_conflicts(repository, run, feature_branch, replay)
        if conflict is not None:
            raise conflict

    def _find_conflicts(
        self,
        repository: LocalRepositoryAdapter,
        run: CherryPickRun,
        feature_branch: str,
        replay: ReplaySpec,
    ) -> CherryPickConflictError | None:
        conflicts, files = repository.has_conflicts()
        if not conflicts:
            return None

        run.has_conflicts = True
        run.conflicting_files = list(files)
        logger.info("Cherry pick of PR #%d left conflicts in %s", run.pr_number, feature_branch)
        return CherryPickConflictError(feature_branch, replay.commits, files)

    def _push_feature_branch(self, repository: LocalRepositoryAdapter, feature_branch: str) -> str:
        """Push the feature branch and return the head ref for the new PR."""
        remote = self.options.remote
        head = feature_branch

        if self.options.fork_owner:
            remote = self._ensure_fork_remote(repository, self.options.fork_owner)
            head = f"{self.options.fork_owner}:{feature_branch}"

        repository.push(feature_branch, remote)
        logger.info("Successfully pushed %s to remote %s", feature_branch, remote)
        return head

    def _ensure_fork_remote(self, repository: LocalRepositoryAdapter, fork_owner: str) -> str:
        if repository.remote_url(fork_owner) is None:
            url = fork_remote_url(repository.main_remote_url(), fork_owner)
            repository.add_remote(fork_owner, url)
        return fork_owner

    def _open_pull_request(
        self, run: CherryPickRun, pr: PullRequest, head: str
    ) -> PullRequestRef:
        params = {"number": pr.number, "branch": run.target_branch, "username": pr.username}
        return self.gateway.create_pull_request(
            self.options.repo_owner,
            self.options.repo_name,
            head=head,
            base=run.target_branch,
            title=PR_TITLE_TEMPLATE.format(**params),
            body=PR_BODY_TEMPLATE.format(**params),
            maintainer_can_modify=True,
        )

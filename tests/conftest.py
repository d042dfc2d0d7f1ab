"""Shared fixtures for the cherry-picker test suite."""

from cherrypicker.testing.conftest import (  # noqa: F401
    cherry_picker_options,
    merge_committed_pr,
    mock_gateway,
    mock_gateway_with_merge_pr,
    mock_gateway_with_rebase_pr,
    mock_gateway_with_squash_pr,
    mock_repository,
    rebase_merged_pr,
    squash_merged_pr,
)

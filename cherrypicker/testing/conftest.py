"""
Pytest plugin for cherry-picker testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["cherrypicker.testing.conftest"]

Or import the fixtures directly:

    from cherrypicker.testing.fixtures import mock_gateway, squash_merged_pr
"""

# Re-export all fixtures for pytest auto-discovery
from cherrypicker.testing.fixtures import (
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

__all__ = [
    "mock_gateway",
    "mock_repository",
    "cherry_picker_options",
    "squash_merged_pr",
    "rebase_merged_pr",
    "merge_committed_pr",
    "mock_gateway_with_squash_pr",
    "mock_gateway_with_rebase_pr",
    "mock_gateway_with_merge_pr",
]

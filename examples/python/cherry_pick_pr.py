#!/usr/bin/env python3
"""
Cherry-pick a merged pull request onto another branch.

Configuration comes from the environment (see CherryPickerOptions.from_env
and GitHubClient.from_env). The URL of the new pull request is printed to
stdout; diagnostics go to stderr.

Run with: python examples/python/cherry_pick_pr.py <pr-number> <branch>
"""

import logging
import sys

from cherrypicker import (
    CherryPicker,
    CherryPickerError,
    CherryPickerOptions,
    GitHubClient,
    configure_logging,
)


def main(argv: list[str]) -> int:
    if len(argv) != 3 or not argv[1].isdigit():
        print(f"usage: {argv[0]} <pr-number> <branch>", file=sys.stderr)
        return 2

    configure_logging(level=logging.INFO)
    pr_number, branch = int(argv[1]), argv[2]

    try:
        options = CherryPickerOptions.from_env()
        with GitHubClient.from_env() as github:
            pull_request = CherryPicker(github, options).create_cherry_pick(pr_number, branch)
    except CherryPickerError as e:
        print(f"error: {e}", file=sys.stderr)
        for note in getattr(e.__cause__, "__notes__", []):
            print(f"  {note}", file=sys.stderr)
        return 1

    print(pull_request.url)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))

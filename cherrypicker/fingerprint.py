"""
Content fingerprints for commits.

A fingerprint summarises the set of blobs a commit changed. Rewriting a
commit (squash, rebase-and-merge) changes its SHA but not the blobs it
writes, so fingerprints are what we compare across branches.
"""

import hashlib
from collections.abc import Iterable

# Fingerprint of a commit that records no file changes
EMPTY_FINGERPRINT = ""

_SEPARATOR = ":"


def fingerprint(files: Iterable[tuple[str, str]]) -> str:
    """
    Compute the order-independent fingerprint of a set of changed files.

    Blob hashes are sorted before hashing so two commits touching the same
    content in a different order fingerprint identically.

    Args:
        files: (path, blob_sha) pairs changed by a commit

    Returns:
        Hex-encoded SHA-256 digest, or EMPTY_FINGERPRINT for no changes
    """
    hashes = sorted(blob_sha for _, blob_sha in files)
    if not hashes:
        return EMPTY_FINGERPRINT

    digest = hashlib.sha256(_SEPARATOR.join(hashes).encode("utf-8"))
    return digest.hexdigest()


__all__ = ["EMPTY_FINGERPRINT", "fingerprint"]

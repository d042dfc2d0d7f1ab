"""
Property-based tests for content fingerprints.

Feature: cherrypicker
"""

import hashlib

from hypothesis import given, settings
from hypothesis import strategies as st

from cherrypicker.fingerprint import EMPTY_FINGERPRINT, fingerprint
from cherrypicker.testing import create_mock_commit

blob_sha_strategy = st.text(alphabet="0123456789abcdef", min_size=40, max_size=40)
path_strategy = st.text(
    alphabet=st.characters(whitelist_categories=("Ll", "Nd"), whitelist_characters="/._-"),
    min_size=1,
    max_size=40,
)
file_set_strategy = st.lists(
    st.tuples(path_strategy, blob_sha_strategy),
    min_size=1,
    max_size=20,
    unique_by=lambda pair: pair[1],
)


@given(files=file_set_strategy, data=st.data())
@settings(max_examples=100)
def test_property_fingerprint_order_independent(files: list[tuple[str, str]], data) -> None:
    """
    Property 1: Fingerprint order-independence

    For any permutation of a file-change set, fingerprint SHALL produce the
    identical string.
    """
    permuted = data.draw(st.permutations(files))

    assert fingerprint(permuted) == fingerprint(files)


@given(files=file_set_strategy, data=st.data(), replacement=blob_sha_strategy)
@settings(max_examples=100)
def test_property_fingerprint_sensitive_to_blob_change(
    files: list[tuple[str, str]],
    data,
    replacement: str,
) -> None:
    """
    Property 2: Fingerprint sensitivity

    Changing any single blob hash in the set SHALL change the fingerprint.
    """
    index = data.draw(st.integers(min_value=0, max_value=len(files) - 1))
    path, blob = files[index]
    if replacement == blob:
        replacement = "f" * 40 if blob != "f" * 40 else "0" * 40

    changed = list(files)
    changed[index] = (path, replacement)

    assert fingerprint(changed) != fingerprint(files)


@given(files=file_set_strategy)
@settings(max_examples=100)
def test_property_fingerprint_is_sha256_hex(files: list[tuple[str, str]]) -> None:
    """A non-empty file set fingerprints to a 64 character hex digest."""
    result = fingerprint(files)

    assert len(result) == 64
    assert all(c in "0123456789abcdef" for c in result)


def test_empty_file_set_fingerprint() -> None:
    """The empty set fingerprints to the empty-string sentinel."""
    assert fingerprint([]) == ""
    assert fingerprint([]) == EMPTY_FINGERPRINT
    assert create_mock_commit("sha1").fingerprint() == EMPTY_FINGERPRINT


def test_fingerprint_sorts_by_blob_not_path() -> None:
    """Paths do not take part in the ordering or the digest."""
    expected = hashlib.sha256(b"aaa:bbb").hexdigest()

    assert fingerprint([("z.go", "aaa"), ("a.go", "bbb")]) == expected
    assert fingerprint([("a.go", "bbb"), ("z.go", "aaa")]) == expected
    assert fingerprint([("renamed.go", "bbb"), ("other.go", "aaa")]) == expected


def test_commit_fingerprint_ignores_sha_and_parents() -> None:
    """Rewritten commits with the same blobs fingerprint alike."""
    original = create_mock_commit("pr1", parents=("fork",), files=[("a.go", "a1")])
    rebased = create_mock_commit("br1", parents=("main",), files=[("a.go", "a1")])

    assert original.fingerprint() == rebased.fingerprint()

from __future__ import annotations

"""git_list_files/services/diagnostics/error_classifier.py

Centralized error classification for git invocations.

This module looks at a GitResult (stdout, stderr, return code, etc.)
and assigns a stable, machine-readable `failure_reason` string.

The classification is:
- deterministic (no randomness)
- text-based (pattern matching against known git error signatures)

Typical failure_reason values:
- timeout
- process-spawn-error
- git-binary-not-found
- not-a-repository
- unknown-revision
- repository-not-found
- authentication-failed
- remote-unreachable
- git-non-zero-exit
- unknown-error
"""

import re
from typing import Optional

from git_list_files.services.git.base import GitResult


_REMOTE_NOT_FOUND = re.compile(r"repository '[^']*' not found")


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


def _lower(value: Optional[str]) -> str:
    return _text(value).lower()


def _contains_any(haystack: str, needles: list[str]) -> bool:
    return any(n in haystack for n in needles)


def classify_git_failure(result: GitResult) -> str:
    """Classify a git failure into a stable failure_reason code.

    This function assumes the invocation did *not* succeed.
    It never returns None; at minimum it returns "unknown-error".
    """
    stderr = _lower(result.error)
    rc = result.return_code
    existing_reason = _text(result.failure_reason)

    # 1) Respect explicit timeout/spawn markers from the runner layer,
    #    refining a spawn failure when the binary itself is missing.
    if existing_reason == "process-spawn-error":
        if _contains_any(stderr, ["no such file or directory", "not found"]):
            return "git-binary-not-found"
        return existing_reason
    if existing_reason == "timeout":
        return existing_reason

    # 2) Local repository problems
    if _contains_any(
        stderr,
        [
            "not a git repository",
            "cannot change to",
        ],
    ):
        return "not-a-repository"

    # 3) Bad tree-ish
    if _contains_any(
        stderr,
        [
            "not a valid object name",
            "not a tree object",
            "unknown revision",
            "bad revision",
            "ambiguous argument",
            "invalid object name",
        ],
    ):
        return "unknown-revision"

    # 4) Remote repository problems
    if _contains_any(
        stderr,
        [
            "authentication failed",
            "could not read username",
            "permission denied (publickey)",
            "terminal prompts disabled",
        ],
    ):
        return "authentication-failed"

    if _contains_any(
        stderr,
        [
            "repository not found",
            "does not appear to be a git repository",
            "does not exist",
        ],
    ) or _REMOTE_NOT_FOUND.search(stderr):
        return "repository-not-found"

    if _contains_any(
        stderr,
        [
            "could not resolve host",
            "connection refused",
            "connection timed out",
            "unable to access",
            "could not read from remote repository",
            "network is unreachable",
        ],
    ):
        return "remote-unreachable"

    # 5) Non-zero exit without a more specific classification
    if rc is not None and rc != 0:
        return "git-non-zero-exit"

    # 6) Fall back to existing reason or unknown
    if existing_reason:
        return existing_reason
    return "unknown-error"

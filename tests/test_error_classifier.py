from __future__ import annotations

import pytest

from git_list_files.services.diagnostics.error_classifier import classify_git_failure
from git_list_files.services.git.base import GitResult


def _failed(error: str | None, return_code: int | None = 128, failure_reason: str | None = None) -> GitResult:
    return GitResult(
        success=False,
        output="",
        error=error,
        return_code=return_code,
        failure_reason=failure_reason,
    )


@pytest.mark.parametrize(
    "stderr, expected",
    [
        ("fatal: not a git repository (or any of the parent directories): .git", "not-a-repository"),
        ("fatal: cannot change to '/nope': No such file or directory", "not-a-repository"),
        ("fatal: Not a valid object name nope", "unknown-revision"),
        ("fatal: not a tree object", "unknown-revision"),
        ("fatal: repository 'https://example.com/x.git/' not found", "repository-not-found"),
        ("remote: Repository not found.\nfatal: repository 'x' not found", "repository-not-found"),
        ("fatal: '/tmp/x' does not appear to be a git repository", "repository-not-found"),
        ("fatal: could not read Username for 'https://github.com': terminal prompts disabled", "authentication-failed"),
        ("fatal: unable to access 'https://nope.invalid/': Could not resolve host: nope.invalid", "remote-unreachable"),
        ("fatal: something else entirely", "git-non-zero-exit"),
    ],
)
def test_stderr_signatures(stderr, expected):
    assert classify_git_failure(_failed(stderr)) == expected


def test_runner_markers_are_respected():
    assert classify_git_failure(_failed("timeout", None, "timeout")) == "timeout"
    assert (
        classify_git_failure(_failed("Permission denied: 'git'", None, "process-spawn-error"))
        == "process-spawn-error"
    )


def test_missing_binary():
    result = _failed("[Errno 2] No such file or directory: 'gitx'", None, "process-spawn-error")

    assert classify_git_failure(result) == "git-binary-not-found"


def test_unknown_error_when_nothing_matches():
    assert classify_git_failure(_failed(None, None)) == "unknown-error"

"""Exception hierarchy for git-list-files.

- UsageError: malformed or missing command-line input (exit 1)
- ArgumentCountError: a context renderer call with the wrong arity
- SourceUnavailableError: the context renderer cannot read a source
- AbnormalTermination: an explicit non-zero termination (e.g. a signal)
- GitCommandError: the delegated git invocation failed
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from git_list_files.services.git.base import GitResult


class GitListFilesError(Exception):
    """Base class for all errors raised by this package."""

    exit_code: int = 1


class UsageError(GitListFilesError):
    """Raised when the command line cannot be parsed or validated."""


class ArgumentCountError(GitListFilesError, TypeError):
    """Raised when render_context() gets fewer than 2 or more than 3 inputs."""

    def __init__(self, given: int):
        super().__init__(f"incorrect number of arguments: expected 2 or 3, got {given}")
        self.given = given


class SourceUnavailableError(GitListFilesError):
    """Raised when a source identifier has no readable lines."""

    def __init__(self, source: str):
        super().__init__(f"source is not readable: {source}")
        self.source = source


class AbnormalTermination(GitListFilesError):
    """Raised to unwind the process with a specific non-zero exit code."""

    def __init__(self, exit_code: int, message: str | None = None):
        super().__init__(message or f"abnormal termination (exit {exit_code})")
        self.exit_code = exit_code


class GitCommandError(GitListFilesError):
    """Raised when a git invocation does not succeed.

    Carries the full GitResult so callers can inspect stderr, the
    command line and the classified failure reason.
    """

    def __init__(self, result: GitResult):
        self.result = result
        self.failure_reason = result.failure_reason or "unknown-error"
        detail = (result.error or "").strip().splitlines()
        message = f"git failed ({self.failure_reason})"
        if detail:
            message = f"{message}: {detail[-1]}"
        super().__init__(message)
        rc = result.return_code
        if not rc:
            self.exit_code = 1
        elif rc < 0:
            # killed by signal -rc
            self.exit_code = 128 - rc
        else:
            self.exit_code = rc

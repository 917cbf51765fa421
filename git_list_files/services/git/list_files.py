from __future__ import annotations

"""git_list_files/services/git/list_files.py

List the files tracked at a tree-ish, for a local or a remote repository.

Key points:
- A repository that names an existing directory is listed in place with
  `git -C <dir> ls-tree`.
- Anything else is handed to `git clone --bare` (with a blob-less partial
  clone filter by default) into a temporary directory, which is listed
  and then removed. Transports are entirely git's business.
- `ls-tree` always runs with `-z` so names with newlines or unusual bytes
  are split correctly; the requested separator is applied on output.
"""

import fnmatch
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterable, List

from git_list_files.config import get_settings
from git_list_files.errors import GitCommandError
from git_list_files.schemas import ListFilesRequest
from git_list_files.services.diagnostics.error_classifier import classify_git_failure
from git_list_files.services.git.base import GitResult, GitSettings, run_git

logger = logging.getLogger(__name__)


def is_local_repository(repository: str) -> bool:
    return Path(repository).expanduser().is_dir()


def _require_success(result: GitResult) -> GitResult:
    if not result.success:
        result.failure_reason = classify_git_failure(result)
        logger.info(
            "%s exited with %s (%s) after %.2fs",
            " ".join(result.command or ["git"]),
            result.return_code,
            result.failure_reason,
            result.duration_seconds or 0.0,
        )
        raise GitCommandError(result)
    return result


def ls_tree(repo_dir: str | Path, tree: str, *, config: GitSettings | None = None) -> List[str]:
    """Return every file path tracked at ``tree`` in the repository at ``repo_dir``."""
    result = _require_success(
        run_git(
            ["-C", str(repo_dir), "ls-tree", "-r", "-z", "--name-only", "--full-tree", tree],
            config=config,
        )
    )
    return [name for name in result.output.split("\0") if name]


def clone_bare(url: str, destination: str | Path, *, config: GitSettings | None = None) -> None:
    """Make a bare (and, when configured, blob-less) clone of ``url``."""
    settings = get_settings()
    config = config or GitSettings.from_settings(timeout_seconds=settings.clone_timeout_seconds)
    args = ["clone", "--bare", "--quiet"]
    if settings.clone_filter:
        args.append(f"--filter={settings.clone_filter}")
    args += ["--", url, str(destination)]
    _require_success(run_git(args, config=config))


def matches_pattern(path: str, pattern: str) -> bool:
    """True if ``path`` is ``pattern``, lies under it, or matches it as a glob."""
    if path == pattern or path.startswith(pattern + "/"):
        return True
    return fnmatch.fnmatchcase(path, pattern)


def filter_paths(paths: Iterable[str], patterns: List[str]) -> List[str]:
    if not patterns:
        return list(paths)
    return [p for p in paths if any(matches_pattern(p, pat) for pat in patterns)]


def list_files(request: ListFilesRequest) -> List[str]:
    """Resolve ``request`` to the list of matching tracked paths."""
    if is_local_repository(request.repository):
        repo_dir = os.path.expanduser(request.repository)
        logger.info("listing %s at %s", repo_dir, request.tree)
        paths = ls_tree(repo_dir, request.tree)
    else:
        logger.info("cloning %s to list %s", request.repository, request.tree)
        with tempfile.TemporaryDirectory(prefix="git-list-files-") as tmp:
            clone_dir = Path(tmp) / "repo.git"
            clone_bare(request.repository, clone_dir)
            paths = ls_tree(clone_dir, request.tree)

    selected = filter_paths(paths, request.patterns)
    logger.debug("%d of %d path(s) selected", len(selected), len(paths))
    return selected


def write_paths(paths: Iterable[str], stream: BinaryIO, *, null_separated: bool = False) -> int:
    """Write each path followed by a newline or NUL; return the count."""
    terminator = b"\0" if null_separated else b"\n"
    count = 0
    for path in paths:
        stream.write(path.encode("utf-8", "surrogateescape") + terminator)
        count += 1
    stream.flush()
    return count

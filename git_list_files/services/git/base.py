from __future__ import annotations

"""git_list_files/services/git/base.py

Shared utilities for delegating work to the git binary.

This module provides:

- GitSettings: per-invocation runtime configuration (binary, timeout, env)
- GitResult: structured result for a single git invocation
- run_command: low-level helper that executes a command and captures output
- run_git: run_command bound to the configured git binary
- detect_git_version: small helper for `git --version`

The listing operation in ``list_files`` builds on top of these helpers.
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

from git_list_files.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class GitSettings:
    """Per-invocation runtime settings."""

    binary: str = "git"
    timeout_seconds: int = 120
    env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, *, timeout_seconds: int | None = None) -> "GitSettings":
        settings = get_settings()
        return cls(
            binary=settings.git_binary,
            timeout_seconds=timeout_seconds or settings.git_timeout_seconds,
            # Never block on a credential prompt; fail and report instead.
            env={"GIT_TERMINAL_PROMPT": "0"},
        )


@dataclass
class GitResult:
    """Result of a single git invocation."""

    success: bool
    output: str
    error: str | None = None
    return_code: int | None = None
    command: list[str] | None = None
    duration_seconds: float | None = None
    failure_reason: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def run_command(
    cmd: List[str],
    *,
    timeout: int = 120,
    env: dict[str, str] | None = None,
    workdir: str | Path | None = None,
) -> GitResult:
    """Run a command and capture stdout/stderr in memory.

    Output is decoded as UTF-8 with ``surrogateescape`` so that file names
    which are not valid UTF-8 survive a round trip back to bytes.
    """
    environment = os.environ.copy()
    environment.update(env or {})

    logger.debug("running: %s", " ".join(cmd))
    started_at = _now()
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            timeout=timeout,
            check=False,
            cwd=str(workdir) if workdir is not None else None,
            env=environment,
        )
        finished_at = _now()
        return GitResult(
            success=proc.returncode == 0,
            output=proc.stdout or "",
            error=proc.stderr or None,
            return_code=proc.returncode,
            command=cmd,
            duration_seconds=(finished_at - started_at).total_seconds(),
            # Detailed failure_reason will be set by error_classifier.
            failure_reason=None,
        )
    except subprocess.TimeoutExpired as exc:
        finished_at = _now()
        partial = exc.stdout or ""
        if isinstance(partial, bytes):
            partial = partial.decode("utf-8", "surrogateescape")
        return GitResult(
            success=False,
            output=partial,
            error="timeout",
            return_code=None,
            command=cmd,
            duration_seconds=(finished_at - started_at).total_seconds(),
            failure_reason="timeout",
        )
    except OSError as exc:
        finished_at = _now()
        return GitResult(
            success=False,
            output="",
            error=str(exc),
            return_code=None,
            command=cmd,
            duration_seconds=(finished_at - started_at).total_seconds(),
            failure_reason="process-spawn-error",
        )


def run_git(
    args: List[str],
    *,
    config: GitSettings | None = None,
    workdir: str | Path | None = None,
) -> GitResult:
    """Run ``git <args>`` with the configured binary, timeout and env."""
    config = config or GitSettings.from_settings()
    return run_command(
        [config.binary, *args],
        timeout=config.timeout_seconds,
        env=config.env,
        workdir=workdir,
    )


@lru_cache(maxsize=8)
def detect_git_version(binary: str) -> str | None:
    """Best-effort version detection for the git binary."""
    try:
        proc = subprocess.run(
            [binary, "--version"],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
        output = (proc.stdout or proc.stderr or "").strip()
        return output.splitlines()[0] if output else None
    except (OSError, subprocess.TimeoutExpired):
        return None

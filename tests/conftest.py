from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from git_list_files.config import get_settings

GIT = shutil.which("git")

REPO_FILES = {
    "README.md": "# demo\n",
    "src/a.py": "print('a')\n",
    "src/pkg/b.py": "print('b')\n",
    "docs/guide.txt": "guide\n",
}


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Plain-text logs and a clean settings cache for every test."""
    monkeypatch.setenv("GIT_LIST_FILES_LOG_COLOR", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            "-c", "init.defaultBranch=main",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A repository with two commits; the first lacks docs/guide.txt."""
    if GIT is None:
        pytest.skip("git binary not available")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    for name, content in REPO_FILES.items():
        if name == "docs/guide.txt":
            continue
        path = repo / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", "initial")
    _git(repo, "tag", "v1")

    guide = repo / "docs" / "guide.txt"
    guide.parent.mkdir(parents=True, exist_ok=True)
    guide.write_text(REPO_FILES["docs/guide.txt"])
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", "add docs")
    return repo


@pytest.fixture
def numbered_source(tmp_path: Path) -> Path:
    """A 20-line text file whose lines read "line 1" .. "line 20"."""
    path = tmp_path / "numbered.txt"
    path.write_text("".join(f"line {n}\n" for n in range(1, 21)))
    return path

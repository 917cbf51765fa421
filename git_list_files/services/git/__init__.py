from __future__ import annotations

"""git_list_files/services/git/__init__.py

Delegation to the git binary.

- base: subprocess wrapper returning a structured GitResult
- list_files: local or remote listing at a tree-ish, with path filtering
"""

from .base import GitResult, GitSettings, detect_git_version, run_command, run_git  # noqa: F401
from .list_files import filter_paths, list_files, write_paths  # noqa: F401

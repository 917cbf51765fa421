# git_list_files/__init__.py
from __future__ import annotations

"""
List the files tracked in a local or remote git repository at a tree-ish.

The CLI lives in git_list_files.cli, git delegation in services.git and
the logging/stack-trace facility in services.diagnostics.
"""

__version__ = "0.1.0"

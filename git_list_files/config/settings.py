from __future__ import annotations

"""git_list_files/config/settings.py

Environment-driven configuration for the CLI.

This module centralizes:
- the git binary to delegate to
- timeouts for local listings and remote clones
- the partial-clone filter used for remote repositories
- diagnostics defaults (stack trace depth, colored output)

Every field can be overridden with a ``GIT_LIST_FILES_`` environment
variable or a ``.env`` file in the working directory.
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  # Git tooling
  git_binary: str = "git"
  git_timeout_seconds: int = 120
  clone_timeout_seconds: int = 600
  # Passed as `--filter=<value>` when cloning a remote; empty disables it.
  clone_filter: str = "blob:none"

  # Defaults for the listing itself
  default_tree: str = "HEAD"

  # Diagnostics
  stack_trace_max_depth: int = 3
  log_color: bool = True

  model_config = SettingsConfigDict(
      env_prefix="GIT_LIST_FILES_",
      env_file=".env",
      env_file_encoding="utf-8",
      extra="ignore",
  )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()

# git_list_files/schemas/__init__.py
from __future__ import annotations

"""
Pydantic schemas for validated CLI input.

This module is the contract between option parsing (cli.py) and the
listing service (services.git.list_files). Anything the user typed is
checked here before it reaches git.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


class ListFilesRequest(BaseModel):
    """
    Validated parameters for a single listing.

    repository can be:
    - a local directory (working tree or bare repository), or
    - anything git can clone (URL, scp-style address, ...).
    """

    repository: str
    tree: str = "HEAD"
    patterns: List[str] = Field(default_factory=list)
    null_separated: bool = False
    verbosity: int = Field(default=0, ge=0)

    @field_validator("repository", "tree")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("tree")
    @classmethod
    def _no_option_tree(cls, value: str) -> str:
        # Keep git from parsing the tree-ish as one of its own options.
        if value.startswith("-"):
            raise ValueError(f"tree-ish must not start with '-': {value}")
        return value

    @staticmethod
    def _normalize_pattern(raw_pattern: str) -> str:
        """Normalize a path pattern to a repository-relative form.

        Strips whitespace, leading "./" segments and leading/trailing
        slashes so "./src/", "/src" and "src" all select the same paths.
        """
        pattern = raw_pattern.strip()
        while pattern.startswith("./"):
            pattern = pattern[2:]
        return pattern.strip("/")

    @model_validator(mode="after")
    def normalize_patterns(self) -> "ListFilesRequest":
        normalized: list[str] = []
        for raw in self.patterns:
            if raw.strip().startswith("-"):
                raise ValueError(f"path pattern must not start with '-': {raw}")
            pattern = self._normalize_pattern(raw)
            if not pattern:
                raise ValueError(f"empty path pattern: {raw!r}")
            normalized.append(pattern)
        self.patterns = normalized
        return self

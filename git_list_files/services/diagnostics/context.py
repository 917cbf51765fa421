"""Render a source location as a short, numbered snippet."""

from __future__ import annotations

import linecache
import logging
import os

from git_list_files.errors import ArgumentCountError, SourceUnavailableError
from git_list_files.services.diagnostics.logger import LEVEL_STYLES, RESET

DEFAULT_ROUTINE = "call"
CONTEXT_LINES = 3
MARKER = ">>>"


def render_header(line: int, routine: str, source: str, *, color: bool = False) -> str:
    header = f"{routine} on line {line} of {source}:"
    if color:
        _, fg = LEVEL_STYLES[logging.ERROR]
        header = f"{fg}{header}{RESET}"
    return header


def render_context(*args: object, color: bool = False) -> str:
    """
    Render ``render_context(line, [routine], source)``.

    Returns a header naming the routine, line and source, followed by the
    source lines ``line - 3`` through ``line + 3`` (clipped to the source)
    each prefixed with its own number; the target line is marked with
    ``>>>``.

    Raises:
        ArgumentCountError: fewer than 2 or more than 3 positional inputs.
        ValueError: ``line`` is not a positive integer.
        SourceUnavailableError: ``source`` has no readable lines.
    """
    if len(args) == 2:
        line, source = args
        routine = DEFAULT_ROUTINE
    elif len(args) == 3:
        line, routine, source = args
    else:
        raise ArgumentCountError(len(args))

    if isinstance(line, bool) or not isinstance(line, int) or line < 1:
        raise ValueError(f"line must be a positive integer, got {line!r}")
    routine = str(routine) if routine else DEFAULT_ROUTINE
    source = str(source)

    # linecache would fall back to sys.path for a relative name; only the
    # named file itself is acceptable.
    if not os.path.isfile(source):
        raise SourceUnavailableError(source)
    linecache.checkcache(source)
    lines = linecache.getlines(source)
    if not lines:
        raise SourceUnavailableError(source)

    first = max(1, line - CONTEXT_LINES)
    last = min(len(lines), line + CONTEXT_LINES)

    out = [render_header(line, routine, source, color=color)]
    for number in range(first, last + 1):
        text = lines[number - 1].rstrip("\r\n")
        marker = MARKER if number == line else ""
        out.append("%-5d%3s%s" % (number, marker, text))
    return "\n".join(out)

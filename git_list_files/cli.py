from __future__ import annotations

"""git_list_files/cli.py

Command-line entry point.

    git-list-files [-hvz] [-r <REPOSITORY>] [-t <TREE-ISH>] [<PATH>]...

Responsibilities:
- parse and validate options against the option policy below
- delegate the listing to services.git.list_files
- write the selected paths to stdout
- report failures on stderr: an ERROR line, usage text for bad input,
  and a stack trace of the failing call chain on any non-zero exit
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Sequence

from pydantic import ValidationError

from git_list_files.config import Settings, get_settings
from git_list_files.errors import GitCommandError, GitListFilesError, UsageError
from git_list_files.schemas import ListFilesRequest
from git_list_files.services.diagnostics import (
    EXIT,
    ExitContext,
    ProcessLifecycle,
    StackTraceReporter,
    log_debug,
    log_error,
    log_warn,
    setup_logging,
)
from git_list_files.services.git import detect_git_version, list_files, write_paths

logger = logging.getLogger(__name__)

PROG = "git-list-files"

USAGE = """\
NAME
	{prog} -- CLI utility for listing the files in a local or remote git repository.

SYNOPSIS
	{prog} [-hvz] [-r <REPOSITORY>] [-t <TREE-ISH>] [<PATH>]...

DESCRIPTION
	{prog} is a CLI utility for listing the files in a local or remote git repository.

	The options are as follows:

	-h	print this help and exit

	-v	increase verbosity
		may be given more than once

	-z	separate files with NUL byte

	-r <REPOSITORY>
		repository URL or directory path (default: {repository})

	-t <TREE-ISH>
		git tree-ish for which to list the files (default: {tree})


	[<PATH>] (optional) path patterns for which to list matching files
"""


@dataclass
class OptionPolicy:
    """Constraints checked on top of what argparse enforces."""

    # options which must be given
    required: tuple[str, ...] = ()
    # options which may be given more than once
    additive: tuple[str, ...] = ("v",)
    # positional argument bounds (None: unchecked)
    min_positional: int | None = None
    max_positional: int | None = None


DEFAULT_POLICY = OptionPolicy()


def default_repository() -> str:
    return str(Path.cwd().resolve())


def usage_text(prog: str = PROG, *, repository: str | None = None, tree: str = "HEAD") -> str:
    return USAGE.format(prog=prog, repository=repository or default_repository(), tree=tree)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


@dataclass
class _ParseState:
    policy: OptionPolicy
    usage: str
    provided: List[str] = field(default_factory=list)

    def record(self, option: str) -> None:
        if option not in self.policy.additive and option in self.provided:
            raise UsageError(f"option cannot be given more than once: {option}")
        self.provided.append(option)


def _tracked(base: type[argparse.Action], state: _ParseState) -> type[argparse.Action]:
    class _Tracked(base):  # type: ignore[misc, valid-type]
        def __call__(self, parser, namespace, values, option_string=None):
            state.record(self.option_strings[0].lstrip("-"))
            super().__call__(parser, namespace, values, option_string)

    return _Tracked


def _build_parser(state: _ParseState, *, repository: str, tree: str) -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, add_help=False, allow_abbrev=False)

    class _HelpAction(argparse.Action):
        def __call__(self, parser, namespace, values, option_string=None):
            sys.stderr.write(state.usage)
            raise SystemExit(0)

    store = _tracked(argparse._StoreAction, state)
    store_true = _tracked(argparse._StoreTrueAction, state)
    count = _tracked(argparse._CountAction, state)

    parser.add_argument("-h", action=_HelpAction, nargs=0)
    parser.add_argument("-v", dest="verbosity", action=count, default=0)
    parser.add_argument("-z", dest="null_separated", action=store_true)
    parser.add_argument("-r", dest="repository", metavar="REPOSITORY", action=store, default=repository)
    parser.add_argument("-t", dest="tree", metavar="TREE-ISH", action=store, default=tree)
    parser.add_argument("patterns", metavar="PATH", nargs="*")
    return parser


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "input"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def parse_args(
    argv: Sequence[str],
    *,
    settings: Settings | None = None,
    policy: OptionPolicy = DEFAULT_POLICY,
) -> ListFilesRequest:
    """Parse ``argv`` into a validated ListFilesRequest.

    Raises:
        UsageError: unknown/duplicate options, bad positional counts,
            missing required options or invalid values.
        SystemExit: ``-h`` (code 0) after printing usage to stderr.
    """
    settings = settings or get_settings()
    repository = default_repository()
    state = _ParseState(
        policy=policy,
        usage=usage_text(repository=repository, tree=settings.default_tree),
    )
    parser = _build_parser(state, repository=repository, tree=settings.default_tree)
    # Options may follow or sit between paths.
    ns = parser.parse_intermixed_args(list(argv))

    positional = ns.patterns
    if policy.min_positional is not None and len(positional) < policy.min_positional:
        raise UsageError(
            f"at least {policy.min_positional} positional argument(s) needed "
            f"but got only {len(positional)}: {' '.join(positional)}"
        )
    if policy.max_positional is not None and len(positional) > policy.max_positional:
        raise UsageError(
            f"up to {policy.max_positional} positional argument(s) allowed "
            f"but got {len(positional)}: {' '.join(positional)}"
        )

    missing = [opt for opt in policy.required if opt not in state.provided]
    if missing:
        raise UsageError(f"missing required options: {' '.join(missing)}")

    try:
        return ListFilesRequest(
            repository=ns.repository,
            tree=ns.tree,
            patterns=positional,
            null_separated=ns.null_separated,
            verbosity=ns.verbosity,
        )
    except ValidationError as exc:
        raise UsageError(_validation_message(exc)) from exc


def run(
    argv: Sequence[str],
    *,
    stdout: BinaryIO | None = None,
    settings: Settings | None = None,
) -> None:
    """Parse ``argv``, list the files and write them to ``stdout``.

    Errors are logged here and re-raised so the caller can map them to an
    exit code.
    """
    settings = settings or get_settings()
    try:
        request = parse_args(argv, settings=settings)
    except UsageError as exc:
        log_error(exc)
        sys.stderr.write(usage_text(tree=settings.default_tree))
        raise

    setup_logging(request.verbosity, color=settings.log_color)
    log_debug(f"verbosity: {request.verbosity}")
    log_debug(f"null_sep: {request.null_separated}")
    log_debug(f"repository: {request.repository}")
    log_debug(f"tree: {request.tree}")
    if request.patterns:
        log_debug("positional args: " + "".join(f'\n\t"{p}"' for p in request.patterns))
    else:
        log_debug("no positional args given")
    if request.verbosity >= 2:
        log_debug(f"git: {detect_git_version(settings.git_binary) or 'unknown version'}")

    try:
        paths = list_files(request)
    except GitCommandError as exc:
        log_error(exc)
        raise

    out = stdout if stdout is not None else sys.stdout.buffer
    count = write_paths(paths, out, null_separated=request.null_separated)
    logger.info("%d file(s) listed", count)


def main(argv: Sequence[str] | None = None, *, stdout: BinaryIO | None = None) -> int:
    """Run the CLI and return the process exit code.

    The run's outcome is captured once, here, as an ExitContext and handed
    to the EXIT trap, which prints a stack trace for any non-zero code.
    """
    settings = get_settings()
    setup_logging(0, color=settings.log_color)

    lifecycle = ProcessLifecycle()
    lifecycle.append_trap(StackTraceReporter(settings.stack_trace_max_depth), EXIT)
    # Turn SIGTERM into a normal unwind so the EXIT trap still runs.
    lifecycle.append_trap(lambda context: log_warn("terminated"), "TERM")

    try:
        try:
            run(sys.argv[1:] if argv is None else argv, stdout=stdout, settings=settings)
            context = ExitContext.success()
        finally:
            # A SIGTERM arriving before this returns still unwinds below.
            lifecycle.restore()
    except (GitListFilesError, SystemExit) as exc:
        context = ExitContext.from_exception(exc)
    except KeyboardInterrupt as exc:
        log_warn("interrupted")
        context = ExitContext.from_exception(exc)
    except Exception as exc:  # noqa: BLE001
        log_error(f"{type(exc).__name__}: {exc}")
        context = ExitContext.from_exception(exc)

    lifecycle.fire(EXIT, context)
    return context.last_exit_code


def entrypoint() -> None:
    sys.exit(main())

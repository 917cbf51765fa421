from __future__ import annotations

"""git_list_files/services/diagnostics/stack_trace.py

Stack-trace reporting for abnormal termination.

This module provides:

- StackFrame: one captured call-stack level (line, routine, source)
- ExitContext: the exit code and stack captured once at the boundary
- frame_at: depth-indexed access to captured frames
- log_stack_trace: render up to ``max_depth + 1`` frames at ERROR level
- StackTraceReporter: log_stack_trace bound to a depth, usable as a trap

Frames are always ordered innermost first, so depth 0 is the call site
that failed.
"""

import traceback
from dataclasses import dataclass, field
from types import FrameType
from typing import Sequence

from git_list_files.errors import AbnormalTermination, GitListFilesError
from git_list_files.services.diagnostics.context import (
    DEFAULT_ROUTINE,
    render_context,
    render_header,
)
from git_list_files.services.diagnostics.logger import get_logger, log_error

DEFAULT_MAX_DEPTH = 3


@dataclass(frozen=True)
class StackFrame:
    """One level of the call chain at the moment of failure."""

    line_number: int
    source_identifier: str
    routine_name: str = DEFAULT_ROUTINE

    @classmethod
    def from_summary(cls, summary: traceback.FrameSummary) -> "StackFrame":
        return cls(
            line_number=summary.lineno or 0,
            source_identifier=summary.filename,
            routine_name=summary.name or DEFAULT_ROUTINE,
        )


def _innermost_first(summaries: traceback.StackSummary) -> tuple[StackFrame, ...]:
    return tuple(StackFrame.from_summary(s) for s in reversed(summaries))


def exit_code_for(exc: BaseException) -> int:
    """Map an exception that ended the run to a process exit code."""
    if isinstance(exc, SystemExit):
        if exc.code is None:
            return 0
        if isinstance(exc.code, int):
            return exc.code
        return 1
    if isinstance(exc, KeyboardInterrupt):
        return 130
    if isinstance(exc, GitListFilesError):
        return exc.exit_code
    return 1


@dataclass(frozen=True)
class ExitContext:
    """The outcome of a run, captured once where the EXIT trap fires."""

    last_exit_code: int
    frames: tuple[StackFrame, ...] = field(default_factory=tuple)
    error: BaseException | None = None

    @classmethod
    def success(cls) -> "ExitContext":
        return cls(last_exit_code=0)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ExitContext":
        return cls(
            last_exit_code=exit_code_for(exc),
            frames=_innermost_first(traceback.extract_tb(exc.__traceback__)),
            error=exc,
        )

    @classmethod
    def from_frame(cls, frame: FrameType | None, exit_code: int) -> "ExitContext":
        frames = _innermost_first(traceback.extract_stack(frame)) if frame else ()
        return cls(
            last_exit_code=exit_code,
            frames=frames,
            error=AbnormalTermination(exit_code),
        )


def frame_at(frames: Sequence[StackFrame], depth: int) -> StackFrame | None:
    """Return the frame ``depth`` levels out from the innermost, or None."""
    if 0 <= depth < len(frames):
        return frames[depth]
    return None


def _render_frame(frame: StackFrame, color: bool) -> str:
    try:
        return render_context(
            frame.line_number,
            frame.routine_name,
            frame.source_identifier,
            color=color,
        )
    except (GitListFilesError, ValueError):
        # Source not on disk (e.g. "<string>") or no line number.
        return render_header(
            frame.line_number,
            frame.routine_name,
            frame.source_identifier,
            color=color,
        )


def _use_color(color: bool | None) -> bool:
    if color is not None:
        return color
    # Follow whatever the installed handler was configured with.
    for handler in get_logger().handlers:
        formatter = handler.formatter
        if formatter is not None and hasattr(formatter, "color"):
            return bool(formatter.color)
    return False


def log_stack_trace(
    context: ExitContext,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    color: bool | None = None,
) -> None:
    """
    Log the captured stack of a failed run at ERROR level.

    Nothing is logged when ``context.last_exit_code`` is 0. Otherwise each
    frame from depth 0 up to ``max_depth`` (inclusive) is rendered with its
    surrounding source, followed by a ``routine(line) -> exit N`` summary
    of the innermost frame. Frames past ``max_depth`` are dropped silently.

    Never raises and never changes the exit code.
    """
    last_exit = context.last_exit_code
    if last_exit == 0:
        return

    try:
        use_color = _use_color(color)
        depth = 0
        while depth <= max_depth:
            frame = frame_at(context.frames, depth)
            if frame is None:
                break
            log_error(_render_frame(frame, use_color))
            depth += 1

        innermost = frame_at(context.frames, 0)
        if innermost is None:
            log_error(f"main(0) -> exit {last_exit}")
        else:
            log_error(
                f"{innermost.routine_name}({innermost.line_number}) -> exit {last_exit}"
            )
    except Exception:  # noqa: BLE001
        get_logger().exception("failed to render stack trace (exit %d)", last_exit)


class StackTraceReporter:
    """Callable EXIT handler that runs log_stack_trace with a fixed depth."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, *, color: bool | None = None):
        self.max_depth = max_depth
        self.color = color

    def __call__(self, context: ExitContext) -> None:
        log_stack_trace(context, self.max_depth, color=self.color)

    def __repr__(self) -> str:
        return f"StackTraceReporter(max_depth={self.max_depth})"

from __future__ import annotations

import pytest

from git_list_files.errors import AbnormalTermination, UsageError
from git_list_files.services.diagnostics.logger import setup_logging
from git_list_files.services.diagnostics.stack_trace import (
    ExitContext,
    StackFrame,
    StackTraceReporter,
    exit_code_for,
    frame_at,
    log_stack_trace,
)


def _error_lines(err: str) -> list[str]:
    return [line for line in err.splitlines() if line.startswith("ERROR: ")]


def _frames(source, count: int) -> tuple[StackFrame, ...]:
    return tuple(
        StackFrame(line_number=depth + 5, source_identifier=str(source), routine_name=f"f{depth}")
        for depth in range(count)
    )


def test_success_is_silent(capsys, numbered_source):
    setup_logging(0, color=False)

    log_stack_trace(ExitContext(last_exit_code=0, frames=_frames(numbered_source, 3)))

    assert capsys.readouterr().err == ""


def test_shallow_stack_renders_every_frame_plus_summary(capsys, numbered_source):
    setup_logging(0, color=False)
    context = ExitContext(last_exit_code=2, frames=_frames(numbered_source, 2))

    log_stack_trace(context, max_depth=3)

    lines = _error_lines(capsys.readouterr().err)
    assert lines == [
        f"ERROR: f0 on line 5 of {numbered_source}:",
        f"ERROR: f1 on line 6 of {numbered_source}:",
        "ERROR: f0(5) -> exit 2",
    ]


def test_frames_past_max_depth_are_dropped(capsys, numbered_source):
    setup_logging(0, color=False)
    context = ExitContext(last_exit_code=1, frames=_frames(numbered_source, 6))

    log_stack_trace(context, max_depth=3)

    err = capsys.readouterr().err
    lines = _error_lines(err)
    # depths 0..3 inclusive, then the summary
    assert len(lines) == 5
    assert "f4" not in err
    assert lines[-1] == "ERROR: f0(5) -> exit 1"


def test_frame_snippet_marks_failing_line(capsys, numbered_source):
    setup_logging(0, color=False)
    context = ExitContext(last_exit_code=1, frames=_frames(numbered_source, 1))

    log_stack_trace(context, max_depth=0)

    err = capsys.readouterr().err
    assert "5    >>>line 5" in err
    assert "8       line 8" in err


def test_missing_source_still_reports_header(capsys):
    setup_logging(0, color=False)
    frame = StackFrame(line_number=1, source_identifier="<string>", routine_name="<module>")

    log_stack_trace(ExitContext(last_exit_code=3, frames=(frame,)))

    assert _error_lines(capsys.readouterr().err) == [
        "ERROR: <module> on line 1 of <string>:",
        "ERROR: <module>(1) -> exit 3",
    ]


def test_no_frames_reports_summary_only(capsys):
    setup_logging(0, color=False)

    log_stack_trace(ExitContext(last_exit_code=4))

    assert _error_lines(capsys.readouterr().err) == ["ERROR: main(0) -> exit 4"]


def _outer():
    _middle()


def _middle():
    _inner()


def _inner():
    raise AbnormalTermination(7)


def test_context_from_exception_is_innermost_first(capsys):
    try:
        _outer()
    except AbnormalTermination as exc:
        context = ExitContext.from_exception(exc)

    assert context.last_exit_code == 7
    assert [f.routine_name for f in context.frames] == [
        "_inner",
        "_middle",
        "_outer",
        "test_context_from_exception_is_innermost_first",
    ]
    assert context.frames[0].source_identifier == __file__

    setup_logging(0, color=False)
    StackTraceReporter(max_depth=1)(context)

    err = capsys.readouterr().err
    assert _error_lines(err)[-1] == f"ERROR: _inner({context.frames[0].line_number}) -> exit 7"
    assert ">>>    raise AbnormalTermination(7)" in err
    assert "_outer on line" not in err


def test_frame_at():
    frames = (StackFrame(1, "a.py"), StackFrame(2, "b.py"))

    assert frame_at(frames, 0) == frames[0]
    assert frame_at(frames, 1) == frames[1]
    assert frame_at(frames, 2) is None
    assert frame_at(frames, -1) is None


@pytest.mark.parametrize(
    "exc, code",
    [
        (SystemExit(None), 0),
        (SystemExit(0), 0),
        (SystemExit(3), 3),
        (SystemExit("message"), 1),
        (KeyboardInterrupt(), 130),
        (UsageError("bad"), 1),
        (AbnormalTermination(143), 143),
        (RuntimeError("boom"), 1),
    ],
)
def test_exit_code_for(exc, code):
    assert exit_code_for(exc) == code

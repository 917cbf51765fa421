from __future__ import annotations

"""
Diagnostics: leveled logging, failure classification and stack traces.

This package provides:
- logger: leveled, colorized log lines on stderr
- context: render a source location with surrounding lines
- stack_trace: walk a captured stack on abnormal termination
- lifecycle: ordered EXIT/signal traps that never replace each other
- error_classifier: classify failed git invocations into stable reasons
"""

from .context import render_context, render_header  # noqa: F401
from .lifecycle import EXIT, ProcessLifecycle, TrapRegistration  # noqa: F401
from .logger import (  # noqa: F401
    log_debug,
    log_error,
    log_info,
    log_warn,
    setup_logging,
)
from .stack_trace import (  # noqa: F401
    ExitContext,
    StackFrame,
    StackTraceReporter,
    frame_at,
    log_stack_trace,
)

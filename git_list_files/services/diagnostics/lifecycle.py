from __future__ import annotations

"""git_list_files/services/diagnostics/lifecycle.py

Process lifecycle traps.

ProcessLifecycle keeps an ordered list of handlers per lifecycle signal.
``append_trap`` adds a handler after the ones already registered for that
signal; nothing registered earlier is ever replaced. ``fire`` runs the
handlers in registration order.

Two kinds of signals are supported:

- "EXIT": fired explicitly by the CLI once the run's outcome is known.
- POSIX signals ("SIGINT", "INT", "SIGTERM", ...): the first registration
  installs a dispatcher via ``signal.signal``; any Python-level handler
  that was installed before is kept as the first registration.
"""

import logging
import signal
from dataclasses import dataclass
from types import FrameType
from typing import Callable, Dict, List

from git_list_files.errors import AbnormalTermination
from git_list_files.services.diagnostics.stack_trace import ExitContext

logger = logging.getLogger(__name__)

EXIT = "EXIT"

Handler = Callable[[ExitContext], None]


@dataclass(frozen=True)
class TrapRegistration:
    """A handler bound to a lifecycle signal."""

    signal_name: str
    handler: Handler


def normalize_signal_name(name: str) -> str:
    """Return the canonical name (``EXIT`` or ``SIGxxx``) for ``name``.

    Raises:
        ValueError: the name is neither EXIT nor a known POSIX signal.
    """
    upper = name.strip().upper()
    if upper in (EXIT, "0"):
        return EXIT
    if not upper.startswith("SIG"):
        upper = f"SIG{upper}"
    try:
        signal.Signals[upper]
    except KeyError:
        raise ValueError(f"unknown signal: {name}") from None
    return upper


def _wrap_previous(previous: Callable[[int, FrameType | None], object], signum: int) -> Handler:
    def _run_previous(context: ExitContext) -> None:
        previous(signum, None)

    return _run_previous


class ProcessLifecycle:
    """Owns the ordered trap registrations for this process."""

    def __init__(self) -> None:
        self._traps: Dict[str, List[TrapRegistration]] = {}
        self._original_handlers: Dict[int, object] = {}

    def append_trap(self, handler: Handler, signal_name: str = EXIT) -> TrapRegistration:
        """Register ``handler`` to run after every handler already on ``signal_name``."""
        name = normalize_signal_name(signal_name)
        registrations = self._traps.get(name)
        if registrations is None:
            registrations = self._traps[name] = []
            if name != EXIT:
                self._install_dispatcher(name, registrations)

        registration = TrapRegistration(signal_name=name, handler=handler)
        registrations.append(registration)
        logger.debug("trap %s: %d handler(s)", name, len(registrations))
        return registration

    def registrations(self, signal_name: str) -> tuple[TrapRegistration, ...]:
        return tuple(self._traps.get(normalize_signal_name(signal_name), ()))

    def fire(self, signal_name: str, context: ExitContext) -> None:
        """Run the handlers registered for ``signal_name`` in order.

        A handler that raises is logged; the remaining handlers still run.
        """
        name = normalize_signal_name(signal_name)
        for registration in list(self._traps.get(name, ())):
            try:
                registration.handler(context)
            except Exception:  # noqa: BLE001
                logger.exception("%s handler %r failed", name, registration.handler)

    def restore(self) -> None:
        """Reinstall the OS signal handlers that were active before us."""
        for signum, previous in self._original_handlers.items():
            # None: the handler was not installed from Python; leave it.
            if previous is not None:
                signal.signal(signum, previous)
        self._original_handlers.clear()
        for name in [n for n in self._traps if n != EXIT]:
            del self._traps[name]

    def _install_dispatcher(self, name: str, registrations: List[TrapRegistration]) -> None:
        signum = signal.Signals[name].value
        previous = signal.getsignal(signum)
        self._original_handlers[signum] = previous
        if callable(previous) and previous is not signal.default_int_handler:
            registrations.append(
                TrapRegistration(signal_name=name, handler=_wrap_previous(previous, signum))
            )

        def _dispatch(received: int, frame: FrameType | None) -> None:
            exit_code = 128 + received
            self.fire(name, ExitContext.from_frame(frame, exit_code))
            raise AbnormalTermination(exit_code, f"terminated by {name}")

        signal.signal(signum, _dispatch)

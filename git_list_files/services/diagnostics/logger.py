"""Leveled, colorized diagnostic logging on stderr.

All diagnostics go through the stdlib ``git_list_files`` logger. Each line
is rendered as ``<TAG>: <message>`` where the tag carries a distinct ANSI
foreground color per level, reset right after the tag.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "git_list_files"

ESC = "\x1b["
RESET = f"{ESC}0m"

# level -> (tag, foreground color)
LEVEL_STYLES: dict[int, tuple[str, str]] = {
    logging.DEBUG: ("DEBUG", f"{ESC}37m"),
    logging.INFO: ("INFO", f"{ESC}32m"),
    logging.WARNING: ("WARNING", f"{ESC}33m"),
    logging.ERROR: ("ERROR", f"{ESC}31m"),
    logging.CRITICAL: ("ERROR", f"{ESC}31m"),
}


def verbosity_to_level(verbosity: int) -> int:
    """Map the number of ``-v`` flags to a logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


class LeveledFormatter(logging.Formatter):
    """Render records as ``<color>TAG<reset>: message``."""

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, fg = LEVEL_STYLES.get(record.levelno, (record.levelname, ""))
        if self.color and fg:
            tag = f"{fg}{tag}{RESET}"
        line = f"{tag}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    verbosity: int = 0,
    *,
    color: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure the package logger for a CLI run.

    Replaces any handler installed by a previous call, so it is safe to
    call once per invocation of ``main()``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(LeveledFormatter(color=color))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(verbosity_to_level(verbosity))
    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    """Return the package logger, installing the default handler on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        from git_list_files.config import get_settings

        setup_logging(0, color=get_settings().log_color)
    return logger


def log_debug(message: object) -> None:
    get_logger().debug("%s", message)


def log_info(message: object) -> None:
    get_logger().info("%s", message)


def log_warn(message: object) -> None:
    get_logger().warning("%s", message)


def log_error(message: object) -> None:
    get_logger().error("%s", message)

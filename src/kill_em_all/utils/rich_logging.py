"""Diagnostic logging with phase/PID context and the DEBUG toggle."""

import logging
import os
import sys
from datetime import datetime
from typing import Optional, TextIO

TOOL_NAME = "kill-em-all"
DEBUG_ENV_VAR = "DEBUG"
# Parent of every module logger in the package
PACKAGE_LOGGER = "kill_em_all"


def debug_enabled(value: Optional[str] = None) -> bool:
    """
    Decide whether diagnostics are on from a DEBUG-style value.

    The value is a comma-separated, case-insensitive list. Diagnostics are
    enabled when it contains the tool name, "<tool>:*" or "*".

    Args:
        value: Raw value, reads the DEBUG environment variable when None

    Returns:
        True if diagnostics should be printed
    """
    if value is None:
        value = os.environ.get(DEBUG_ENV_VAR, "")

    entries = {entry.strip() for entry in value.lower().split(",") if entry.strip()}
    return bool(entries & {TOOL_NAME, f"{TOOL_NAME}:*", "*"})


class KillEmAllLogFormatter(logging.Formatter):
    """Formatter that tags lines with the tool name, phase and PID."""

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        phase_context = ""
        if getattr(record, "phase", None):
            phase_context = f"[{record.phase}] "

        pid_context = ""
        if getattr(record, "pid", None) is not None:
            pid_context = f"[pid {record.pid}] "

        if self.use_colors:
            level_colors = {
                "DEBUG": "\033[36m",      # Cyan
                "INFO": "\033[32m",       # Green
                "WARNING": "\033[33m",    # Yellow
                "ERROR": "\033[31m",      # Red
                "CRITICAL": "\033[35m",   # Magenta
            }
            reset = "\033[0m"
            level_color = level_colors.get(record.levelname, "")
        else:
            level_color = ""
            reset = ""

        return (
            f"{timestamp} {level_color}{record.levelname:8s}{reset} "
            f"[{TOOL_NAME}] {phase_context}{pid_context}{record.getMessage()}"
        )


class PhaseLogger(logging.LoggerAdapter):
    """Logger adapter that adds the current escalation phase to every record."""

    def __init__(self, logger: logging.Logger, phase: Optional[str] = None):
        super().__init__(logger, {})
        self.current_phase = phase

    def for_phase(self, phase: str) -> "PhaseLogger":
        """Return a sibling adapter bound to another phase."""
        return PhaseLogger(self.logger, phase)

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        if self.current_phase:
            extra.setdefault("phase", self.current_phase)
        kwargs["extra"] = extra
        return msg, kwargs


def as_phase_logger(logger=None, phase: Optional[str] = None) -> PhaseLogger:
    """Wrap whatever the caller passed (or the package logger) in a PhaseLogger."""
    if logger is None:
        logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(logger, PhaseLogger):
        return logger.for_phase(phase) if phase else logger
    if isinstance(logger, logging.LoggerAdapter):
        logger = logger.logger
    return PhaseLogger(logger, phase)


def setup_logging(
    debug: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> PhaseLogger:
    """
    Configure the package logger for command-line use.

    Module loggers (kill_em_all.*) propagate to it, so the DEBUG toggle and
    the formatter apply to every line the package emits.

    Args:
        debug: Force diagnostics on/off, None reads DEBUG once
        stream: Output stream (default: stderr)

    Returns:
        PhaseLogger writing to the stream, at DEBUG level when enabled and
        WARNING otherwise
    """
    if debug is None:
        debug = debug_enabled()
    stream = stream or sys.stderr

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False

    # Close existing handlers before clearing (prevents file descriptor leak)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    use_colors = stream.isatty() if hasattr(stream, "isatty") else False
    handler = logging.StreamHandler(stream)
    handler.setFormatter(KillEmAllLogFormatter(use_colors=use_colors))
    logger.addHandler(handler)

    return PhaseLogger(logger)

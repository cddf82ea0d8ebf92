"""Shared utility functions for kill-em-all."""

from .rich_logging import (
    KillEmAllLogFormatter,
    PhaseLogger,
    as_phase_logger,
    debug_enabled,
    setup_logging,
)
from .subprocess_utils import QueryResult, parse_pids, run_query

__all__ = [
    # Logging
    "KillEmAllLogFormatter",
    "PhaseLogger",
    "as_phase_logger",
    "debug_enabled",
    "setup_logging",
    # Subprocess queries
    "QueryResult",
    "parse_pids",
    "run_query",
]

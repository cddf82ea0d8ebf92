"""Platform process backends, selected once per interpreter."""

import sys
from typing import Optional

from .base import (
    FORCE_KILL_SIGNAL,
    ProcessBackend,
    ProcessState,
    SignalSpec,
    resolve_signal,
    signal_name,
)

_backend: Optional[ProcessBackend] = None


def get_backend() -> ProcessBackend:
    """Return the backend for the running platform (cached after first call)."""
    global _backend
    if _backend is None:
        if sys.platform == "win32":
            from .windows import WindowsBackend
            _backend = WindowsBackend()
        else:
            from .posix import PosixBackend
            _backend = PosixBackend()
    return _backend


__all__ = [
    "FORCE_KILL_SIGNAL",
    "ProcessBackend",
    "ProcessState",
    "SignalSpec",
    "get_backend",
    "resolve_signal",
    "signal_name",
]

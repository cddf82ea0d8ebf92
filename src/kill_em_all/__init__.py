"""Kill a process and all of its descendants, and wait until they are gone."""

from .backends import ProcessBackend, ProcessState, get_backend, resolve_signal
from .config import Settings, TerminationOptions, load_settings
from .controller import kill_em_all, terminate_set, terminate_tree
from .discovery import discover_tree
from .errors import BackendUnavailableError, KillEmAllError, TerminationTimeoutError
from .launcher import launch_and_test
from .watcher import Deadline, ExitWatcher, WatcherState

__version__ = "0.1.0"

__all__ = [
    # Engine
    "terminate_tree",
    "terminate_set",
    "discover_tree",
    "kill_em_all",
    "launch_and_test",
    # Building blocks
    "Deadline",
    "ExitWatcher",
    "WatcherState",
    "ProcessBackend",
    "ProcessState",
    "get_backend",
    "resolve_signal",
    # Configuration
    "Settings",
    "TerminationOptions",
    "load_settings",
    # Errors
    "KillEmAllError",
    "BackendUnavailableError",
    "TerminationTimeoutError",
]

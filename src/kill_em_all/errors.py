"""Exceptions raised by the termination engine."""

from typing import Iterable, Optional, Union


class KillEmAllError(Exception):
    """Base class for all kill-em-all errors."""


class BackendUnavailableError(KillEmAllError):
    """Raised when a process query mechanism cannot be started or fails fatally.

    Distinct from "this PID has no children": that case is an empty result.
    """

    def __init__(self, cmd: str, reason: str, returncode: Optional[int] = None):
        self.cmd = cmd
        self.reason = reason
        self.returncode = returncode
        message = f"Process query failed: {cmd}: {reason}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        super().__init__(message)


class TerminationTimeoutError(KillEmAllError, TimeoutError):
    """Raised when processes are still running after the last phase's deadline."""

    def __init__(
        self,
        target: Union[int, Iterable[int]],
        timeout_ms: float,
        survivors: Optional[Iterable[int]] = None,
    ):
        self.target = target if isinstance(target, int) else sorted(target)
        self.timeout_ms = timeout_ms
        self.survivors = sorted(survivors) if survivors is not None else []

        if isinstance(self.target, int):
            what = f"process tree with root PID {self.target}"
        else:
            what = f"processes {', '.join(str(p) for p in self.target)}"
        message = f"Failed to kill {what} within timeout ({timeout_ms:g}ms)."
        if self.survivors:
            message += f" Unconfirmed: {', '.join(str(p) for p in self.survivors)}"
        super().__init__(message)

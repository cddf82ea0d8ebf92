"""Per-process exit watcher and the per-phase deadline it observes."""

import asyncio
from enum import Enum
from typing import Optional

from .backends import ProcessBackend, ProcessState, get_backend, signal_name
from .config import POLL_INTERVAL_MS, ZOMBIE_PROBE_EVERY
from .utils.rich_logging import as_phase_logger


class Deadline:
    """
    Cancellation deadline shared read-only by every watcher in a phase.

    Fires once, timeout_ms after start(). cancel() stops the timer so a
    deadline that elapses after the phase barrier never reports as fired.
    """

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        self._fired = False
        self._handle: Optional[asyncio.TimerHandle] = None

    def start(self) -> "Deadline":
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(self.timeout_ms, 0) / 1000, self._fire)
        return self

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._fired = True

    @property
    def fired(self) -> bool:
        return self._fired


class WatcherState(Enum):
    DISPATCHING = "dispatching"
    WAITING = "waiting"
    TERMINATED = "terminated"
    ABORTED = "aborted"


class ExitWatcher:
    """
    Sends one signal to one PID and waits until it is gone or a zombie.

    Polls every poll_interval seconds. The full state probe (the only way to
    see zombies) runs on the first iteration and every zombie_probe_every-th
    one after; the iterations in between use the cheaper liveness check.
    A fired deadline ends the watch as ABORTED without confirming exit.
    """

    def __init__(
        self,
        pid: int,
        sig: int,
        deadline: Deadline,
        *,
        backend: Optional[ProcessBackend] = None,
        poll_interval: float = POLL_INTERVAL_MS / 1000,
        zombie_probe_every: int = ZOMBIE_PROBE_EVERY,
        logger=None,
    ):
        self.pid = pid
        self.sig = sig
        self.deadline = deadline
        self.backend = backend or get_backend()
        self.poll_interval = poll_interval
        self.zombie_probe_every = zombie_probe_every
        self.logger = as_phase_logger(logger)
        self.state = WatcherState.DISPATCHING
        self.iterations = 0

    def _log(self, msg: str) -> None:
        self.logger.debug(msg, extra={"pid": self.pid})

    async def run(self) -> WatcherState:
        self._log(f"Sending {signal_name(self.sig)}")
        delivered = await self.backend.dispatch(self.pid, self.sig)
        if not delivered:
            self._log("Process is already dead")
            self.state = WatcherState.TERMINATED
            return self.state

        self.state = WatcherState.WAITING
        while True:
            if self.deadline.fired:
                self._log(f"Giving up waiting after {signal_name(self.sig)}")
                self.state = WatcherState.ABORTED
                return self.state

            if self.iterations % self.zombie_probe_every == 0:
                observed = await self.backend.probe(self.pid)
                if observed is ProcessState.ZOMBIE:
                    # Only the real parent can reap it; its resources are already released
                    self._log("Process is a zombie, considering it exited")
                    break
                if observed is ProcessState.ABSENT:
                    break
            self.iterations += 1

            if not await self.backend.is_alive(self.pid):
                break

            await asyncio.sleep(self.poll_interval)

        self._log("Process has exited")
        self.state = WatcherState.TERMINATED
        return self.state

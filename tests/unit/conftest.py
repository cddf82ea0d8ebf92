"""Shared fixtures for unit tests: an in-memory process table backend."""

import logging
import signal
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import pytest

from kill_em_all.backends.base import FORCE_KILL_SIGNAL, ProcessBackend, ProcessState
from kill_em_all.config import TerminationOptions

GRACEFUL_SIGNALS = frozenset({int(signal.SIGTERM), int(signal.SIGINT)})


@dataclass
class FakeProcess:
    pid: int
    children: List[int] = field(default_factory=list)
    state: ProcessState = ProcessState.ALIVE
    # Signals that make this process exit
    dies_on: Set[int] = field(default_factory=lambda: set(GRACEFUL_SIGNALS) | {FORCE_KILL_SIGNAL})
    # Exit into a zombie instead of disappearing (parent never reaps)
    zombie_on_exit: bool = False
    # Number of state checks the process survives after a fatal signal
    linger: int = 0
    _countdown: Optional[int] = None


class FakeBackend(ProcessBackend):
    """Process table held in a dict; records every call for assertions."""

    name = "fake"

    def __init__(self):
        self.processes: Dict[int, FakeProcess] = {}
        self.signals_sent: List[Tuple[int, int]] = []
        self.probes: List[int] = []
        self.liveness_checks: List[int] = []
        self.children_queries: List[int] = []

    def add(self, pid: int, parent: Optional[int] = None, **kwargs) -> FakeProcess:
        proc = FakeProcess(pid=pid, **kwargs)
        self.processes[pid] = proc
        if parent is not None:
            self.processes[parent].children.append(pid)
        return proc

    def state_of(self, pid: int) -> ProcessState:
        proc = self.processes.get(pid)
        if proc is None:
            return ProcessState.ABSENT
        if proc._countdown is not None:
            if proc._countdown <= 0:
                self._exit(proc)
            else:
                proc._countdown -= 1
        return proc.state

    def _exit(self, proc: FakeProcess) -> None:
        proc._countdown = None
        proc.state = ProcessState.ZOMBIE if proc.zombie_on_exit else ProcessState.ABSENT

    def sent_to(self, pid: int) -> List[int]:
        return [sig for target, sig in self.signals_sent if target == pid]

    async def list_children(self, pid: int) -> List[int]:
        self.children_queries.append(pid)
        proc = self.processes.get(pid)
        if proc is None or proc.state is ProcessState.ABSENT:
            return []
        return list(proc.children)

    async def probe(self, pid: int) -> ProcessState:
        self.probes.append(pid)
        return self.state_of(pid)

    async def is_alive(self, pid: int) -> bool:
        self.liveness_checks.append(pid)
        # Like kill(pid, 0): a zombie still has a table entry
        return self.state_of(pid) is not ProcessState.ABSENT

    async def send_signal(self, pid: int, sig: int) -> bool:
        proc = self.processes.get(pid)
        if proc is None or proc.state is ProcessState.ABSENT:
            return False
        self.signals_sent.append((pid, sig))
        if proc.state is ProcessState.ALIVE and sig in proc.dies_on and proc._countdown is None:
            if proc.linger:
                proc._countdown = proc.linger
            else:
                self._exit(proc)
        return True

    async def force_kill(self, pid: int) -> bool:
        return await self.send_signal(pid, FORCE_KILL_SIGNAL)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def fast_options():
    """Millisecond-scale polling so timeouts stay short."""
    return TerminationOptions(
        graceful_timeout_ms=100,
        poll_interval_ms=1,
    )


@pytest.fixture(autouse=True)
def restore_package_logger():
    """setup_logging() reconfigures the shared package logger; undo it per test."""
    package_logger = logging.getLogger("kill_em_all")
    level = package_logger.level
    propagate = package_logger.propagate
    handlers = package_logger.handlers[:]

    yield

    for handler in package_logger.handlers[:]:
        if handler not in handlers:
            handler.close()
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = propagate

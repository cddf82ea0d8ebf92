"""Process backend interface shared by the POSIX and Windows implementations."""

import signal
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Union

SignalSpec = Union[int, str, signal.Signals]

# Not every platform's signal module defines SIGKILL; 9 is its POSIX number.
FORCE_KILL_SIGNAL = int(getattr(signal, "SIGKILL", 9))


class ProcessState(Enum):
    """Outcome of probing a PID."""
    ALIVE = "alive"
    ZOMBIE = "zombie"  # Exited, not yet reaped by its parent
    ABSENT = "absent"  # Gone or inaccessible


def resolve_signal(sig: SignalSpec) -> int:
    """
    Normalise a signal spec to its number.

    Accepts ints, signal.Signals, numeric strings and names with or without
    the SIG prefix ("SIGINT", "int", "Term").

    Raises:
        ValueError: For unknown names or negative numbers
    """
    if isinstance(sig, signal.Signals):
        return int(sig)
    if isinstance(sig, int):
        if sig < 0:
            raise ValueError(f"Invalid signal number: {sig}")
        return sig

    text = str(sig).strip()
    if text.isdigit():
        return int(text)

    name = text.upper()
    if not name.startswith("SIG"):
        name = f"SIG{name}"

    value = getattr(signal, name, None)
    if isinstance(value, signal.Signals):
        return int(value)
    if name == "SIGKILL":
        return FORCE_KILL_SIGNAL
    raise ValueError(f"Unknown signal: {sig}")


def signal_name(sig: int) -> str:
    """Human-readable name for a signal number (falls back to the number)."""
    try:
        return signal.Signals(sig).name
    except ValueError:
        return "SIGKILL" if sig == FORCE_KILL_SIGNAL else str(sig)


class ProcessBackend(ABC):
    """Platform primitives the termination engine is built on."""

    name: str = "base"
    force_kill_signal: int = FORCE_KILL_SIGNAL

    @abstractmethod
    async def list_children(self, pid: int) -> List[int]:
        """Direct children of pid; empty when there are none."""

    @abstractmethod
    async def probe(self, pid: int) -> ProcessState:
        """Full state query, able to tell zombies apart where the OS has them."""

    @abstractmethod
    async def is_alive(self, pid: int) -> bool:
        """Cheap liveness check, cannot detect zombies."""

    @abstractmethod
    async def send_signal(self, pid: int, sig: int) -> bool:
        """Deliver sig; False if the process was already gone."""

    @abstractmethod
    async def force_kill(self, pid: int) -> bool:
        """Unconditionally terminate pid; False if it was already gone."""

    def is_force_kill(self, sig: int) -> bool:
        return sig == self.force_kill_signal

    async def dispatch(self, pid: int, sig: int) -> bool:
        """Send sig, routing the forceful kill through force_kill()."""
        if self.is_force_kill(sig):
            return await self.force_kill(pid)
        return await self.send_signal(pid, sig)

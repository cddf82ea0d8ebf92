"""POSIX backend: pgrep for children, ps for zombie detection, os.kill for signals."""

import logging
import os
from typing import List

from ..errors import BackendUnavailableError
from ..utils.subprocess_utils import parse_pids, run_query
from .base import FORCE_KILL_SIGNAL, ProcessBackend, ProcessState

logger = logging.getLogger(__name__)


class PosixBackend(ProcessBackend):
    """Backend for Linux, macOS and other Unix-likes."""

    name = "posix"

    def __init__(self, pgrep: str = "pgrep", ps: str = "ps", query_timeout: float = 10.0):
        self.pgrep = pgrep
        self.ps = ps
        self.query_timeout = query_timeout

    async def list_children(self, pid: int) -> List[int]:
        result = await run_query([self.pgrep, "-P", str(pid)], timeout=self.query_timeout)

        # pgrep: 0 = matches, 1 = no matches, 2+ = syntax/fatal error
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise BackendUnavailableError(
                result.cmd,
                result.stderr.strip() or "pgrep failed",
                returncode=result.returncode,
            )
        return parse_pids(result.lines())

    async def probe(self, pid: int) -> ProcessState:
        # -o state= suppresses the header, leaving just the state code ("S", "R", "Z+")
        result = await run_query([self.ps, "-p", str(pid), "-o", "state="], timeout=self.query_timeout)

        state = result.stdout.strip()
        if result.returncode != 0 or not state:
            return ProcessState.ABSENT
        if "Z" in state:
            return ProcessState.ZOMBIE
        return ProcessState.ALIVE

    async def is_alive(self, pid: int) -> bool:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but belongs to someone else; nothing more we can do with it
            logger.debug(f"Access denied probing {pid}, treating as gone")
            return False
        return True

    async def send_signal(self, pid: int, sig: int) -> bool:
        try:
            os.kill(pid, sig)
        except ProcessLookupError:
            return False
        return True

    async def force_kill(self, pid: int) -> bool:
        return await self.send_signal(pid, FORCE_KILL_SIGNAL)

"""Windows backend: PowerShell process-table queries and os.kill."""

import logging
import os
import signal
from typing import List

from ..errors import BackendUnavailableError
from ..utils.subprocess_utils import parse_pids, run_query
from .base import ProcessBackend, ProcessState

logger = logging.getLogger(__name__)

# os.kill reports a PID that no longer exists as ERROR_INVALID_PARAMETER
_ERROR_INVALID_PARAMETER = 87


def _is_gone(error: OSError) -> bool:
    return isinstance(error, ProcessLookupError) or getattr(error, "winerror", None) == _ERROR_INVALID_PARAMETER


class WindowsBackend(ProcessBackend):
    """Backend for Windows. There are no zombies here, so probe() never returns ZOMBIE."""

    name = "windows"

    def __init__(self, powershell: str = "powershell", query_timeout: float = 30.0):
        self.powershell = powershell
        self.query_timeout = query_timeout

    async def _powershell(self, script: str):
        return await run_query(
            [self.powershell, "-NoProfile", "-NonInteractive", "-Command", script],
            timeout=self.query_timeout,
        )

    async def list_children(self, pid: int) -> List[int]:
        result = await self._powershell(
            f"Get-CimInstance Win32_Process -Filter 'ParentProcessId = {pid}' "
            "| Select-Object -ExpandProperty ProcessId"
        )
        if result.returncode != 0:
            raise BackendUnavailableError(
                result.cmd,
                result.stderr.strip() or "process table query failed",
                returncode=result.returncode,
            )
        # The System Idle Process (PID 0) reports itself as its own parent
        return [child for child in parse_pids(result.lines()) if child != pid]

    async def probe(self, pid: int) -> ProcessState:
        # HasExited is True for a handle whose process has ended; a fully gone
        # process prints nothing at all
        result = await self._powershell(
            f"Get-Process -Id {pid} -ErrorAction SilentlyContinue "
            "| Select-Object -ExpandProperty HasExited"
        )
        output = result.stdout.strip().lower()
        if result.returncode != 0 or not output or output == "true":
            return ProcessState.ABSENT
        return ProcessState.ALIVE

    async def is_alive(self, pid: int) -> bool:
        # os.kill(pid, 0) would deliver CTRL_C_EVENT here, so liveness is a table query
        return await self.probe(pid) is ProcessState.ALIVE

    async def send_signal(self, pid: int, sig: int) -> bool:
        if sig in (signal.CTRL_C_EVENT, signal.CTRL_BREAK_EVENT):
            target_sig = sig
        else:
            # Anything else ends in TerminateProcess
            target_sig = signal.SIGTERM
        try:
            os.kill(pid, target_sig)
        except OSError as e:
            if _is_gone(e):
                return False
            raise
        return True

    async def force_kill(self, pid: int) -> bool:
        return await self.send_signal(pid, signal.SIGTERM)

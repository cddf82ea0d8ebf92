"""Async runner for the OS query tools used by the process backends."""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..errors import BackendUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Output of a finished query command."""
    cmd: str
    returncode: int
    stdout: str
    stderr: str

    def lines(self) -> List[str]:
        """Non-empty stripped stdout lines."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]


async def run_query(
    cmd: List[str],
    *,
    timeout: Optional[float] = None,
) -> QueryResult:
    """
    Run a query command and capture its output.

    A non-zero exit code is NOT an error here: tools like pgrep and ps use
    exit code 1 for "nothing matched", and each backend decides what the
    code means.

    Args:
        cmd: Command and arguments (no shell)
        timeout: Timeout in seconds, None waits forever

    Returns:
        QueryResult with decoded stdout/stderr

    Raises:
        BackendUnavailableError: If the command cannot be started or times out
    """
    cmd_str = " ".join(cmd)
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.debug(f"Failed to start {cmd[0]}: {e}")
        raise BackendUnavailableError(cmd_str, f"failed to start {cmd[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        logger.debug(f"Command timed out after {timeout}s: {cmd_str}")
        raise BackendUnavailableError(cmd_str, f"timed out after {timeout}s") from e

    return QueryResult(
        cmd=cmd_str,
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )


def parse_pids(lines: List[str]) -> List[int]:
    """Parse one PID per line, skipping anything that is not an integer."""
    pids = []
    for line in lines:
        try:
            pids.append(int(line))
        except ValueError:
            logger.debug(f"Ignoring non-numeric query output: {line!r}")
    return pids

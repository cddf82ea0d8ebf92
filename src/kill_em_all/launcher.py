"""Launch a command, wait for it to serve a URL, hand back a cleanup callable."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import requests

from .backends import ProcessBackend, SignalSpec
from .config import DEFAULT_SIGNAL, TerminationOptions
from .controller import terminate_tree
from .errors import KillEmAllError

logger = logging.getLogger(__name__)

KillFunction = Callable[..., Awaitable[None]]


def _is_ready(url: str, timeout: float) -> bool:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException:
        return False
    return response.ok


async def launch_and_test(
    command: str,
    url: str,
    *,
    ready_timeout: float = 30.0,
    poll_interval: float = 0.5,
    backend: Optional[ProcessBackend] = None,
    logger=logger,
) -> KillFunction:
    """
    Run command through the shell and wait until url answers with a 2xx.

    Args:
        command: Shell command line to launch
        url: URL polled until it responds successfully
        ready_timeout: Seconds to wait for readiness
        poll_interval: Seconds between readiness checks
        backend: Process backend used by the returned kill function
        logger: Logger for diagnostics

    Returns:
        Coroutine function kill(sig="SIGTERM", options=None) terminating the
        launched process tree

    Raises:
        TimeoutError: If url never became ready (the tree is killed first)
        KillEmAllError: If the command exited before becoming ready
    """
    process = await asyncio.create_subprocess_shell(
        command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    logger.debug(f"Launched {command!r} as PID {process.pid}")

    async def kill(
        sig: SignalSpec = DEFAULT_SIGNAL,
        options: Optional[TerminationOptions] = None,
    ) -> None:
        await terminate_tree(process.pid, sig, options, backend=backend, logger=logger)
        # Our own child: collect its exit status so no zombie is left behind
        await process.wait()

    loop = asyncio.get_running_loop()
    give_up_at = loop.time() + ready_timeout

    while True:
        if await asyncio.to_thread(_is_ready, url, poll_interval):
            logger.debug(f"{url} is ready")
            return kill

        if process.returncode is not None:
            raise KillEmAllError(
                f"Command {command!r} exited with code {process.returncode} before {url} was ready"
            )

        if loop.time() >= give_up_at:
            logger.warning(f"{url} not ready after {ready_timeout}s, killing {command!r}")
            await kill()
            raise TimeoutError(f"{url} did not become ready within {ready_timeout}s")

        await asyncio.sleep(poll_interval)

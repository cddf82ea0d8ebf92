"""Process tree discovery."""

from typing import List, Optional

from .backends import ProcessBackend, get_backend
from .utils.rich_logging import as_phase_logger


async def discover_tree(
    root_pid: int,
    *,
    backend: Optional[ProcessBackend] = None,
    logger=None,
) -> List[int]:
    """
    Collect root_pid and every descendant visible right now.

    The result is a snapshot: processes spawned after their parent was
    queried are not included. The root is always first, even when it no
    longer exists. PIDs reported more than once (PID reuse can make the
    parent links cyclic) are recorded and expanded only once.

    Raises:
        BackendUnavailableError: If the children query cannot run
    """
    backend = backend or get_backend()
    log = as_phase_logger(logger, "discovery")

    pids: List[int] = []
    seen = {root_pid}
    stack = [root_pid]

    while stack:
        pid = stack.pop()
        pids.append(pid)

        children = await backend.list_children(pid)
        if children:
            log.debug(f"Process {pid} has children: {', '.join(map(str, children))}")

        for child in children:
            if child not in seen:
                seen.add(child)
                stack.append(child)

    return pids

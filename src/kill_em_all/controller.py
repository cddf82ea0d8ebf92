"""Two-tier (graceful, then forceful) termination of a process set or tree."""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .backends import ProcessBackend, SignalSpec, get_backend, resolve_signal, signal_name
from .config import DEFAULT_SIGNAL, TerminationOptions
from .discovery import discover_tree
from .errors import TerminationTimeoutError
from .utils.rich_logging import as_phase_logger
from .watcher import Deadline, ExitWatcher, WatcherState


@dataclass
class PhaseResult:
    """Outcome of one phase: which PIDs were confirmed gone and which were not."""
    name: str
    sig: int
    timeout_ms: float
    terminated: List[int] = field(default_factory=list)
    aborted: List[int] = field(default_factory=list)

    @property
    def timed_out(self) -> bool:
        return bool(self.aborted)


async def _run_phase(
    name: str,
    pids: List[int],
    sig: int,
    timeout_ms: float,
    options: TerminationOptions,
    backend: ProcessBackend,
    logger,
) -> PhaseResult:
    log = as_phase_logger(logger, name)
    log.debug(f"Sending {signal_name(sig)} to {len(pids)} process(es), timeout {timeout_ms:g}ms")

    deadline = Deadline(timeout_ms).start()
    watchers = [
        ExitWatcher(
            pid,
            sig,
            deadline,
            backend=backend,
            poll_interval=options.poll_interval_ms / 1000,
            zombie_probe_every=options.zombie_probe_every,
            logger=log,
        )
        for pid in pids
    ]
    try:
        outcomes = await asyncio.gather(*(w.run() for w in watchers), return_exceptions=True)
    finally:
        deadline.cancel()

    # Every watcher has finished by now; surface the first hard failure
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome

    result = PhaseResult(name=name, sig=sig, timeout_ms=timeout_ms)
    for watcher, state in zip(watchers, outcomes):
        if state is WatcherState.TERMINATED:
            result.terminated.append(watcher.pid)
        else:
            result.aborted.append(watcher.pid)

    if result.timed_out:
        log.debug(f"Timed out, unconfirmed: {', '.join(map(str, result.aborted))}")
    return result


async def terminate_set(
    pids: Iterable[int],
    sig: SignalSpec = DEFAULT_SIGNAL,
    options: Optional[TerminationOptions] = None,
    *,
    backend: Optional[ProcessBackend] = None,
    logger=None,
) -> None:
    """
    Signal every PID in pids and wait until all of them have exited.

    Runs a graceful phase with sig. If that phase times out, escalation is
    enabled and sig is not already the forceful kill, a forceful phase sends
    the forceful kill to the whole set (PIDs already gone resolve at once).

    Args:
        pids: Processes to terminate
        sig: Signal name, number or signal.Signals (default SIGTERM)
        options: Timeouts and escalation settings
        backend: Process backend, the platform default when None
        logger: Logger or adapter for diagnostics

    Raises:
        TerminationTimeoutError: If the last phase ran out of time
        BackendUnavailableError: If a process query could not run
    """
    options = options or TerminationOptions()
    backend = backend or get_backend()
    sig = resolve_signal(sig)
    targets = list(dict.fromkeys(pids))

    result = await _run_phase(
        "graceful", targets, sig, options.graceful_timeout_ms, options, backend, logger,
    )

    if result.timed_out and options.escalate_on_timeout and not backend.is_force_kill(sig):
        result = await _run_phase(
            "forceful",
            targets,
            backend.force_kill_signal,
            options.effective_forceful_timeout_ms,
            options,
            backend,
            logger,
        )

    if result.timed_out:
        raise TerminationTimeoutError(targets, result.timeout_ms, survivors=result.aborted)


async def terminate_tree(
    root_pid: int,
    sig: SignalSpec = DEFAULT_SIGNAL,
    options: Optional[TerminationOptions] = None,
    *,
    backend: Optional[ProcessBackend] = None,
    logger=None,
) -> None:
    """
    Kill root_pid and all of its descendants and wait for them to exit.

    The tree is discovered once, before any signal is sent. Absent roots are
    not an error: the call simply succeeds.

    Raises:
        TerminationTimeoutError: If the tree could not be killed in time
        BackendUnavailableError: If a process query could not run
    """
    backend = backend or get_backend()
    pids = await discover_tree(root_pid, backend=backend, logger=logger)
    as_phase_logger(logger).debug(f"Killing processes: {', '.join(map(str, pids))}")

    try:
        await terminate_set(pids, sig, options, backend=backend, logger=logger)
    except TerminationTimeoutError as e:
        raise TerminationTimeoutError(root_pid, e.timeout_ms, survivors=e.survivors) from None


kill_em_all = terminate_tree

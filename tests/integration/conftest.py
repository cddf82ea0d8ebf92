"""Fixtures that spawn real process chains (POSIX only)."""

import asyncio
import os
import signal
import subprocess

import pytest

from kill_em_all.discovery import discover_tree
from process_helpers import chain_args, free_port, wait_until_serving


@pytest.fixture
def spawn_chain():
    """Start P -> A -> B -> C (C serves HTTP); yields a factory returning (process, url)."""
    started = []

    def _spawn(depth: int = 3, ignore_term: bool = False):
        port = free_port()
        process = subprocess.Popen(chain_args(depth, port, ignore_term), stdin=subprocess.DEVNULL)
        started.append(process)
        url = f"http://127.0.0.1:{port}/"
        wait_until_serving(url)
        return process, url

    yield _spawn

    # Safety net for failed tests: SIGKILL whatever is left of each tree
    for process in started:
        if process.poll() is None:
            for pid in asyncio.run(discover_tree(process.pid)):
                try:
                    os.kill(pid, signal.SIGKILL)
                except ProcessLookupError:
                    pass
        process.wait()

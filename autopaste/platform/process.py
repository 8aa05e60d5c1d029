"""Cross-platform forced process termination.

A delivery tool that outlives its timeout is killed together with any
children it started, so a hung key-injection tool cannot fire a late
keystroke into the next paste:
- Unix: SIGKILL to the process group (children are spawned in a new session)
- Windows: taskkill /T /F -> TerminateProcess
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import subprocess
import sys
from asyncio.subprocess import Process

logger = logging.getLogger(__name__)

REAP_TIMEOUT: float = 1.0

# Windows-specific creation flags (only defined on Windows)
if sys.platform == "win32":
    WINDOWS_CREATIONFLAGS = (
        subprocess.CREATE_NEW_PROCESS_GROUP |
        subprocess.CREATE_NO_WINDOW
    )
else:
    WINDOWS_CREATIONFLAGS = 0


def spawn_kwargs() -> dict:
    """Keyword arguments for ``create_subprocess_exec`` that make a child killable as a tree."""
    if sys.platform == "win32":
        return {"creationflags": WINDOWS_CREATIONFLAGS}
    return {"start_new_session": True}


async def kill_process_tree(process: Process, reap_timeout: float = REAP_TIMEOUT) -> None:
    """Forcefully kill *process* and its children, then reap it."""
    if process.returncode is not None:
        return

    pid = process.pid
    if pid is None:
        return

    if sys.platform == "win32":
        await _kill_windows(process, pid, reap_timeout)
    else:
        _kill_unix(process, pid)

    try:
        await asyncio.wait_for(process.wait(), timeout=reap_timeout)
    except asyncio.TimeoutError:
        logger.warning("Process %d did not exit after kill", pid)


def _kill_unix(process: Process, pid: int) -> None:
    try:
        pgid = os.getpgid(pid)
        os.killpg(pgid, signal.SIGKILL)
        logger.debug("Sent SIGKILL to process group %d", pgid)
    except (ProcessLookupError, PermissionError, OSError):
        # Process group not found, try single process
        try:
            process.kill()
        except ProcessLookupError:
            pass


async def _kill_windows(process: Process, pid: int, reap_timeout: float) -> None:
    try:
        taskkill = await asyncio.create_subprocess_exec(
            "taskkill", "/T", "/F", "/PID", str(pid),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            creationflags=WINDOWS_CREATIONFLAGS,
        )
        await asyncio.wait_for(taskkill.wait(), timeout=reap_timeout)
        logger.debug("taskkill /T /F completed for PID %d", pid)
    except (FileNotFoundError, asyncio.TimeoutError, OSError):
        pass

    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass

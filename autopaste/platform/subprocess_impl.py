"""SubprocessSystemAdapter — real implementation of ISystemAdapter."""

from __future__ import annotations

import asyncio
import logging

from autopaste.platform.process import kill_process_tree, spawn_kwargs
from autopaste.platform.system_adapter import CommandResult, ISystemAdapter

logger = logging.getLogger(__name__)


class SubprocessSystemAdapter(ISystemAdapter):
    """Executes real subprocess calls on the running event loop."""

    async def run_command(self, args: list[str], timeout: float = 1.0) -> CommandResult:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **spawn_kwargs(),
            )
        except (OSError, ValueError) as e:
            return CommandResult(stdout="", stderr=str(e), returncode=-1)

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug("%s timed out after %.2fs, killing pid %s", args[0], timeout, proc.pid)
            await kill_process_tree(proc)
            return CommandResult(stdout="", stderr="timeout", returncode=-1, timed_out=True)

        return CommandResult(
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            returncode=proc.returncode if proc.returncode is not None else -1,
        )

"""ISystemAdapter interface — abstraction for subprocess/system calls."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class CommandResult:
    stdout: str
    stderr: str
    returncode: int
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class ISystemAdapter(ABC):
    """Runs external commands without blocking the event loop.

    Implementations never raise for a failed command: spawn errors come back
    with ``returncode == -1`` and the error text in ``stderr``, timeouts with
    ``timed_out=True`` after the child has been killed.
    """

    @abstractmethod
    async def run_command(self, args: list[str], timeout: float = 1.0) -> CommandResult: ...

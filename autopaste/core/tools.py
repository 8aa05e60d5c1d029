"""Cached presence checks for optional external executables."""

from __future__ import annotations

import logging
import shlex
from typing import Callable

from autopaste.core.cache import DEFAULT_TTL, TTLCache
from autopaste.platform.system_adapter import ISystemAdapter

logger = logging.getLogger(__name__)

PROBE_TIMEOUT: float = 2.0


class ToolAvailabilityCache:
    """``command -v`` lookups memoized per tool name.

    A lookup that cannot be spawned or times out counts as "not installed";
    a tool is never assumed present without a successful lookup.
    """

    def __init__(
        self,
        system: ISystemAdapter,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._system = system
        self._cache: TTLCache[str, bool] = (
            TTLCache(ttl) if clock is None else TTLCache(ttl, clock=clock)
        )

    async def command_exists(self, name: str) -> bool:
        cached = self._cache.get(name)
        if cached is not None:
            return cached.value

        result = await self._system.run_command(
            ['sh', '-c', f'command -v {shlex.quote(name)}'], timeout=PROBE_TIMEOUT
        )
        exists = result.ok
        self._cache.set(name, exists)
        logger.trace("command -v %s -> %s (rc=%s)", name, exists, result.returncode)  # type: ignore[attr-defined]
        return exists

    async def snapshot(self, names: list[str]) -> dict[str, bool]:
        """Availability of several tools, in order, for the strategy selector."""
        return {name: await self.command_exists(name) for name in names}

    def invalidate(self, name: str | None = None) -> None:
        self._cache.invalidate(name)

"""macOS Accessibility permission gate.

Simulating Cmd+V through System Events needs the Accessibility grant.
Asking System Events for a process name needs the same grant, so a
successful ``osascript`` run proves the keystroke will be allowed.
"""

from __future__ import annotations

import logging
from typing import Callable

from autopaste.core.cache import DEFAULT_TTL, TTLCache
from autopaste.core.event_bus import EventBus
from autopaste.core.events import EventType, PermissionDeniedData
from autopaste.platform.system_adapter import ISystemAdapter
from autopaste.utils.desktop import MACOS, detect_platform

logger = logging.getLogger(__name__)

PROBE_SCRIPT = 'tell application "System Events" to get name of first process'
PROBE_TIMEOUT: float = 5.0

# osascript error fragments seen when an old grant belongs to a previous
# build of the app and silently no longer applies
STUCK_PERMISSION_MARKERS = (
    'not allowed assistive access',
    '(-1719)',
    '(-25006)',
)


def is_stuck_permission(stderr: str) -> bool:
    return any(marker in stderr for marker in STUCK_PERMISSION_MARKERS)


class PermissionGatekeeper:
    """Memoized Accessibility probe.

    Every probe that ends in a denial publishes one ``PERMISSION_DENIED``
    event; cache hits publish nothing.
    """

    _KEY = 'accessibility'

    def __init__(
        self,
        system: ISystemAdapter,
        bus: EventBus | None = None,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] | None = None,
        platform: str | None = None,
    ) -> None:
        self._system = system
        self._bus = bus
        self._platform = platform or detect_platform()
        self._cache: TTLCache[str, bool] = (
            TTLCache(ttl) if clock is None else TTLCache(ttl, clock=clock)
        )

    @property
    def state(self) -> bool | None:
        """Cached grant, or None while unknown or expired."""
        entry = self._cache.get(self._KEY)
        return None if entry is None else entry.value

    async def check_permission(self) -> bool:
        if self._platform != MACOS:
            return True

        cached = self._cache.get(self._KEY)
        if cached is not None:
            logger.debug("Accessibility permission (cached): %s", cached.value)
            return cached.value

        result = await self._system.run_command(['osascript', '-e', PROBE_SCRIPT], timeout=PROBE_TIMEOUT)
        granted = result.ok
        self._cache.set(self._KEY, granted)

        if granted:
            logger.debug("Accessibility permission granted")
        else:
            logger.warning("Accessibility permission missing (rc=%s): %s",
                           result.returncode, result.stderr.strip())
            if self._bus is not None:
                self._bus.emit(
                    EventType.PERMISSION_DENIED,
                    PermissionDeniedData(stderr=result.stderr, stuck=is_stuck_permission(result.stderr)),
                )
        return granted

    def invalidate(self) -> None:
        self._cache.invalidate(self._KEY)

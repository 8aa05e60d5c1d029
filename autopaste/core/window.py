"""Focused-window classification on Linux.

Terminal emulators reserve Ctrl+V/Ctrl+C for the shell, so they paste with
Ctrl+Shift+V. When the window class cannot be determined the window is
treated as a regular application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from autopaste.core.tools import ToolAvailabilityCache
from autopaste.platform.system_adapter import ISystemAdapter
from autopaste.utils.desktop import SessionInfo

logger = logging.getLogger(__name__)

PROBE_TIMEOUT: float = 1.0

# Matched as substrings of the lower-cased WM_CLASS
TERMINAL_CLASSES = (
    'konsole',
    'gnome-terminal',
    'terminal',
    'kitty',
    'alacritty',
    'terminator',
    'xterm',
    'urxvt',
    'rxvt',
    'tilix',
    'terminology',
    'wezterm',
    'foot',
    'st',
    'yakuake',
)


def is_terminal_class(window_class: str | None) -> bool:
    if not window_class:
        return False
    lowered = window_class.lower()
    return any(term in lowered for term in TERMINAL_CLASSES)


@dataclass(frozen=True)
class WindowProbe:
    window_class: str | None = None
    source: str | None = None       # 'xdotool' | 'kdotool'
    is_terminal: bool = False

    @property
    def xdotool_class(self) -> str | None:
        """Class seen through xdotool; doubles as proof the XWayland bridge is live."""
        return self.window_class if self.source == 'xdotool' else None


class FocusedWindowClassifier:
    def __init__(self, system: ISystemAdapter, tools: ToolAvailabilityCache) -> None:
        self._system = system
        self._tools = tools

    async def xdotool_window_class(self, session: SessionInfo, xdotool_exists: bool) -> str | None:
        if not xdotool_exists or (session.is_wayland and not session.xwayland_available):
            return None
        result = await self._system.run_command(
            ['xdotool', 'getactivewindow', 'getwindowclassname'], timeout=PROBE_TIMEOUT
        )
        if not result.ok:
            return None
        return result.stdout.strip().lower() or None

    async def kdotool_window_class(self) -> str | None:
        if not await self._tools.command_exists('kdotool'):
            return None
        id_result = await self._system.run_command(['kdotool', 'getactivewindow'], timeout=PROBE_TIMEOUT)
        if not id_result.ok:
            return None
        window_id = id_result.stdout.strip()
        if not window_id:
            return None
        class_result = await self._system.run_command(
            ['kdotool', 'getwindowclassname', window_id], timeout=PROBE_TIMEOUT
        )
        if not class_result.ok:
            return None
        return class_result.stdout.strip().lower() or None

    async def probe(self, session: SessionInfo, xdotool_exists: bool | None = None) -> WindowProbe:
        if xdotool_exists is None:
            xdotool_exists = await self._tools.command_exists('xdotool')

        window_class = await self.xdotool_window_class(session, xdotool_exists)
        source = 'xdotool'
        if window_class is None:
            # KDE Wayland exposes native windows through kdotool only
            window_class = await self.kdotool_window_class()
            source = 'kdotool'
        if window_class is None:
            return WindowProbe()

        logger.trace("Focused window class via %s: %s", source, window_class)  # type: ignore[attr-defined]
        terminal = is_terminal_class(window_class)
        if terminal:
            logger.debug("Terminal detected via %s: %s", source, window_class)
        return WindowProbe(window_class=window_class, source=source, is_terminal=terminal)

    async def is_terminal_focused(self, session: SessionInfo) -> bool:
        return (await self.probe(session)).is_terminal

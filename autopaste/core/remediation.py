"""Accessibility remediation dialog for macOS.

Subscribes to ``PERMISSION_DENIED`` and, in the background, asks the user
whether to open the Privacy & Security pane. Nothing here ever raises into
the paste path: every failure is logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging

from autopaste.core.event_bus import EventBus
from autopaste.core.events import Event, EventType, PermissionDeniedData
from autopaste.platform.system_adapter import ISystemAdapter

logger = logging.getLogger(__name__)

DIALOG_TIMEOUT: float = 300.0
OPEN_TIMEOUT: float = 10.0
OPEN_BUTTON = 'Open System Settings'

SETTINGS_COMMANDS = [
    ['open', 'x-apple.systempreferences:com.apple.preference.security?Privacy_Accessibility'],
    ['open', '-b', 'com.apple.systempreferences'],
    ['open', '/System/Library/PreferencePanes/Security.prefPane'],
    # Last resort: just bring up the settings app, whichever name it has
    ['open', '-a', 'System Preferences'],
    ['open', '-a', 'System Settings'],
]


def build_dialog_message(app_name: str, stuck: bool) -> str:
    if stuck:
        return (
            f"{app_name} needs Accessibility permissions, but it looks like an old "
            f"permission from a previous version is still registered.\n\n"
            f"To fix this:\n"
            f"1. Open System Settings > Privacy & Security > Accessibility\n"
            f"2. Remove any old \"{app_name}\" entries (and unclear ones such as \"Electron\" or \"Python\")\n"
            f"3. Click + and add {app_name} again\n"
            f"4. Make sure the checkbox is enabled\n"
            f"5. Restart {app_name}\n\n"
            f"Without this permission text is only copied to the clipboard.\n\n"
            f"Would you like to open System Settings now?"
        )
    return (
        f"{app_name} needs Accessibility permissions to paste text into other applications.\n\n"
        f"Clipboard copy works, but simulating Cmd+V fails.\n\n"
        f"To fix this:\n"
        f"1. Open System Settings > Privacy & Security > Accessibility\n"
        f"2. Click the lock icon and enter your password\n"
        f"3. Add {app_name} to the list and check the box\n"
        f"4. Restart {app_name}\n\n"
        f"Would you like to open System Settings now?"
    )


def _applescript_string(text: str) -> str:
    return '"' + text.replace('\\', '\\\\').replace('"', '\\"') + '"'


class AccessibilityRemediation:
    """Shows the permission dialog once per denied probe."""

    def __init__(self, system: ISystemAdapter, app_name: str = 'AutoPaste') -> None:
        self._system = system
        self.app_name = app_name
        self._tasks: set[asyncio.Task] = set()

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(EventType.PERMISSION_DENIED, self.handle)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(EventType.PERMISSION_DENIED, self.handle)

    def handle(self, event: Event) -> None:
        data: PermissionDeniedData = event.data
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; skipping Accessibility dialog")
            return
        task = loop.create_task(self.show_dialog(stuck=data.stuck))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for any dialog still on screen (used on shutdown and in tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def show_dialog(self, stuck: bool = False) -> bool:
        """Show the dialog; return True if System Settings was opened."""
        message = build_dialog_message(self.app_name, stuck)
        script = (
            f'display dialog {_applescript_string(message)} '
            f'buttons {{"Cancel", "{OPEN_BUTTON}"}} default button "{OPEN_BUTTON}"'
        )
        result = await self._system.run_command(['osascript', '-e', script], timeout=DIALOG_TIMEOUT)
        if not result.ok:
            # Cancel also lands here (osascript exits 1 with "User canceled")
            logger.info("Accessibility dialog dismissed or failed: %s", result.stderr.strip())
            return False
        return await self.open_system_settings()

    async def open_system_settings(self) -> bool:
        for args in SETTINGS_COMMANDS:
            result = await self._system.run_command(args, timeout=OPEN_TIMEOUT)
            if result.ok:
                logger.debug("Opened settings with: %s", ' '.join(args))
                return True
            logger.debug("Could not open settings with %s: %s", ' '.join(args), result.stderr.strip())
        logger.warning("Could not open System Settings; grant Accessibility access manually")
        return False

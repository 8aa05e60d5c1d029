"""PasteManager — clipboard round-trip and the public paste API.

``paste_text`` snapshots the clipboard, puts the text on it, asks the
strategy selector for mechanisms, lets the executor deliver the keystroke,
and restores the original clipboard a little later. On failure the text
is left on the clipboard for a manual paste.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import asdict, dataclass, field
from functools import partial
from typing import Awaitable, Callable, Mapping

from autopaste.config import load_config, validate_config
from autopaste.core.diagnostics import (
    LinuxContext,
    desktop_failure,
    linux_failure,
    permission_failure,
    recommended_linux_install,
)
from autopaste.core.errors import ClipboardError, PasteError
from autopaste.core.event_bus import EventBus
from autopaste.core.events import EventType, PasteOutcomeData
from autopaste.core.executor import DeliveryExecutor, Diagnose
from autopaste.core.permissions import PermissionGatekeeper
from autopaste.core.remediation import AccessibilityRemediation
from autopaste.core.strategy import (
    APPLESCRIPT,
    NIRCMD,
    POWERSHELL,
    REASON_PERMISSION_DENIED,
    WTYPE,
    XDOTOOL,
    Selection,
    linux_tool_eligibility,
    merge_timings,
    select_candidates,
)
from autopaste.core.tools import ToolAvailabilityCache
from autopaste.core.window import FocusedWindowClassifier
from autopaste.log import preview
from autopaste.platform.clipboard import IClipboard, PyperclipClipboard
from autopaste.platform.subprocess_impl import SubprocessSystemAdapter
from autopaste.platform.system_adapter import ISystemAdapter
from autopaste.utils.desktop import MACOS, WINDOWS, SessionInfo, detect_platform, get_session_info

logger = logging.getLogger(__name__)

NIRCMD_EXE = 'nircmd.exe'


@dataclass(frozen=True)
class ClipboardSnapshot:
    original_text: str


@dataclass
class PasteResult:
    mechanism_id: str
    platform: str
    elapsed: float
    text_length: int
    attempts: list[PasteError] = field(default_factory=list)


@dataclass
class PasteToolsStatus:
    platform: str
    available: bool
    method: str | None
    requires_permission: bool = False
    tools: list[str] = field(default_factory=list)
    recommended_install: str | None = None
    is_wayland: bool | None = None
    xwayland_available: bool | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        # Linux-only keys and an unset recommendation are left out
        return {k: v for k, v in data.items() if v is not None or k == 'method'}


class PasteManager:
    """Delivers text into the focused application.

    One paste runs at a time: a second ``paste_text`` waits for the first
    to finish *and* for its clipboard restore, so it never snapshots the
    first call's text as "original" content.
    """

    def __init__(
        self,
        config: dict | None = None,
        system: ISystemAdapter | None = None,
        clipboard: IClipboard | None = None,
        bus: EventBus | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        platform: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = validate_config(config) if config is not None else load_config()
        self.system = system or SubprocessSystemAdapter()
        self.clipboard = clipboard or PyperclipClipboard()
        self.bus = bus or EventBus()
        self.platform = platform or detect_platform()
        self.timings = merge_timings(self.config['timings'])
        self._environ = environ
        self._sleep = sleep

        ttl = self.config['cache_ttl']
        self.tools = ToolAvailabilityCache(self.system, ttl=ttl, clock=clock)
        self.permissions = PermissionGatekeeper(self.system, bus=self.bus, ttl=ttl,
                                                clock=clock, platform=self.platform)
        self.classifier = FocusedWindowClassifier(self.system, self.tools)
        self.executor = DeliveryExecutor(self.system, bus=self.bus, sleep=sleep)

        self.remediation: AccessibilityRemediation | None = None
        if self.config['permission_dialog']:
            self.remediation = AccessibilityRemediation(self.system, app_name=self.config['app_name'])
            self.remediation.attach(self.bus)

        self._lock = asyncio.Lock()
        self._pending_restore: asyncio.Task | None = None
        self._nircmd_checked = False
        self._nircmd_path: str | None = None

    # -- session ----------------------------------------------------------

    def session_info(self) -> SessionInfo:
        return get_session_info(self._environ, platform=self.platform)

    # -- nircmd (Windows) -------------------------------------------------

    def _nircmd_search_paths(self) -> list[str]:
        paths = []
        if self.config.get('nircmd_path'):
            paths.append(self.config['nircmd_path'])
        paths.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'resources', 'bin', NIRCMD_EXE))
        paths.append(os.path.join(os.getcwd(), 'resources', 'bin', NIRCMD_EXE))
        return paths

    def resolve_nircmd_path(self) -> str | None:
        """Locate the bundled nircmd.exe once per manager."""
        if self._nircmd_checked:
            return self._nircmd_path
        self._nircmd_checked = True

        if self.platform != WINDOWS:
            return None

        for candidate in self._nircmd_search_paths():
            if os.path.isfile(candidate):
                logger.debug("Found nircmd.exe at: %s", candidate)
                self._nircmd_path = candidate
                return candidate

        logger.info("nircmd.exe not found, will use PowerShell fallback")
        return None

    def get_nircmd_status(self) -> dict:
        if self.platform != WINDOWS:
            return {'available': False, 'reason': 'Not Windows'}
        path = self.resolve_nircmd_path()
        return {'available': bool(path), 'path': path}

    # -- clipboard --------------------------------------------------------

    async def read_clipboard(self) -> str:
        return await self.clipboard.read_text()

    async def write_clipboard(self, text: str) -> dict:
        await self.clipboard.write_text(text)
        return {'success': True}

    def _schedule_restore(self, snapshot: ClipboardSnapshot, delay: float) -> None:
        if not self.config['restore_clipboard']:
            return
        self._pending_restore = asyncio.get_running_loop().create_task(self._restore(snapshot, delay))

    async def _restore(self, snapshot: ClipboardSnapshot, delay: float) -> None:
        await self._sleep(delay)
        try:
            await self.clipboard.write_text(snapshot.original_text)
        except ClipboardError as exc:
            logger.warning("Could not restore original clipboard: %s", exc.message)
            return
        logger.debug("Original clipboard content restored")
        self.bus.emit(EventType.CLIPBOARD_RESTORED, snapshot.original_text)

    async def wait_for_restore(self) -> None:
        """Wait until the last scheduled clipboard restore has run."""
        task = self._pending_restore
        if task is None:
            return
        await asyncio.shield(task)
        if self._pending_restore is task:
            self._pending_restore = None

    # -- planning ---------------------------------------------------------

    async def plan(self, session: SessionInfo) -> tuple[Selection, Diagnose]:
        """Probe the environment and pick candidates plus the matching diagnosis."""
        if session.platform == MACOS:
            granted = await self.permissions.check_permission()
            selection = select_candidates(session, permission_granted=granted, timings=self.timings)
            if selection.reason == REASON_PERMISSION_DENIED:
                return selection, lambda failures: permission_failure()
            return selection, partial(desktop_failure, MACOS)

        if session.platform == WINDOWS:
            selection = select_candidates(session, nircmd_path=self.resolve_nircmd_path(),
                                          timings=self.timings)
            return selection, partial(desktop_failure, WINDOWS)

        tools = await self.tools.snapshot([XDOTOOL, WTYPE])
        window = await self.classifier.probe(session, xdotool_exists=tools[XDOTOOL])
        selection = select_candidates(
            session,
            tools,
            window.is_terminal,
            bridge_confirmed=window.xdotool_class is not None,
            timings=self.timings,
        )
        ctx = LinuxContext(session=session, xdotool_exists=tools[XDOTOOL],
                           wtype_exists=tools[WTYPE], xdotool_class=window.xdotool_class)
        return selection, partial(linux_failure, ctx)

    # -- public API -------------------------------------------------------

    async def paste_text(self, text: str) -> PasteResult:
        async with self._lock:
            await self.wait_for_restore()
            return await self._paste_locked(text)

    async def _paste_locked(self, text: str) -> PasteResult:
        started = time.monotonic()
        session = self.session_info()
        self.bus.emit(EventType.PASTE_STARTED,
                      PasteOutcomeData(session.platform, None, 0.0, len(text)))

        try:
            snapshot = ClipboardSnapshot(await self.clipboard.read_text())
            logger.debug("Saved original clipboard content: %r", preview(snapshot.original_text))
            await self.clipboard.write_text(text)
            logger.debug("Text copied to clipboard: %r", preview(text))

            selection, diagnose = await self.plan(session)
            logger.debug("Paste candidates on %s: %s", session.platform, selection.mechanism_ids)
            result = await self.executor.execute(selection.candidates, diagnose)
        except PasteError as exc:
            elapsed = time.monotonic() - started
            logger.warning("Paste failed on %s after %.0fms: %s",
                           session.platform, elapsed * 1000, exc.message)
            self.bus.emit(EventType.PASTE_FAILED, PasteOutcomeData(
                session.platform, None, elapsed, len(text), error=exc.message))
            raise

        self._schedule_restore(snapshot, result.candidate.restore_delay)
        elapsed = time.monotonic() - started
        logger.info("Paste complete via %s in %.0fms (%d chars)",
                    result.candidate.mechanism_id, elapsed * 1000, len(text))
        self.bus.emit(EventType.PASTE_COMPLETE, PasteOutcomeData(
            session.platform, result.candidate.mechanism_id, elapsed, len(text)))
        return PasteResult(
            mechanism_id=result.candidate.mechanism_id,
            platform=session.platform,
            elapsed=elapsed,
            text_length=len(text),
            attempts=result.failures,
        )

    async def check_paste_tools(self) -> PasteToolsStatus:
        """What would be used to paste right now, for diagnostics screens."""
        session = self.session_info()

        if session.platform == MACOS:
            return PasteToolsStatus(platform=MACOS, available=True, method=APPLESCRIPT,
                                    requires_permission=True)

        if session.platform == WINDOWS:
            method = NIRCMD if self.resolve_nircmd_path() else POWERSHELL
            return PasteToolsStatus(platform=WINDOWS, available=True, method=method)

        # No live window probe here: an available bridge is assumed usable
        can_use_wtype, can_use_xdotool = linux_tool_eligibility(
            session, xdotool_exists=True, bridge_confirmed=session.xwayland_available)

        tools = []
        if can_use_wtype and await self.tools.command_exists(WTYPE):
            tools.append(WTYPE)
        if can_use_xdotool and await self.tools.command_exists(XDOTOOL):
            tools.append(XDOTOOL)

        available = bool(tools)
        return PasteToolsStatus(
            platform=session.platform,
            available=available,
            method=tools[0] if tools else None,
            tools=tools,
            recommended_install=None if available else recommended_linux_install(session),
            is_wayland=session.is_wayland,
            xwayland_available=session.xwayland_available,
        )

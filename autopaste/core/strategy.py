"""Delivery strategy selection.

``select_candidates`` is pure: given the session, tool availability and
probe results it returns the ordered mechanisms worth trying. All
probing (tool lookups, window class, permission) happens before it is
called, so identical inputs always give the identical list.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from autopaste.utils.desktop import LINUX, MACOS, WINDOWS, SessionInfo

APPLESCRIPT = 'applescript'
NIRCMD = 'nircmd'
POWERSHELL = 'powershell'
WTYPE = 'wtype'
XDOTOOL = 'xdotool'

MECHANISMS = (APPLESCRIPT, NIRCMD, POWERSHELL, WTYPE, XDOTOOL)

REASON_PERMISSION_DENIED = 'permission_denied'

APPLESCRIPT_PASTE = 'tell application "System Events" to keystroke "v" using command down'
POWERSHELL_PASTE = (
    "[void][System.Reflection.Assembly]::LoadWithPartialName('System.Windows.Forms');"
    "[System.Windows.Forms.SendKeys]::SendWait('^v')"
)

PASTE_CHORD = 'ctrl+v'
TERMINAL_PASTE_CHORD = 'ctrl+shift+v'


@dataclass(frozen=True)
class MechanismTiming:
    pre_delay: float        # lets the clipboard write settle before the keystroke
    timeout: float
    restore_delay: float    # lets the target app read the clipboard before restore


DEFAULT_TIMINGS: dict[str, MechanismTiming] = {
    # AppleScript keystrokes are queued asynchronously by System Events
    APPLESCRIPT: MechanismTiming(pre_delay=0.05, timeout=3.0, restore_delay=0.1),
    NIRCMD: MechanismTiming(pre_delay=0.03, timeout=2.0, restore_delay=0.08),
    POWERSHELL: MechanismTiming(pre_delay=0.04, timeout=5.0, restore_delay=0.08),
    # X11/Wayland events go straight to the server, but the client drains
    # its event queue late
    WTYPE: MechanismTiming(pre_delay=0.0, timeout=1.0, restore_delay=0.2),
    XDOTOOL: MechanismTiming(pre_delay=0.0, timeout=1.0, restore_delay=0.2),
}


def merge_timings(overrides: Mapping[str, Mapping[str, float]] | None) -> dict[str, MechanismTiming]:
    """Apply per-mechanism overrides (already validated) onto the defaults."""
    timings = dict(DEFAULT_TIMINGS)
    for mechanism, values in (overrides or {}).items():
        timings[mechanism] = replace(timings[mechanism], **dict(values))
    return timings


@dataclass(frozen=True)
class DeliveryCandidate:
    mechanism_id: str
    command: str
    args: tuple[str, ...]
    pre_delay: float
    timeout: float
    restore_delay: float
    # tried instead of the next list entry when this candidate fails
    escalate_to: DeliveryCandidate | None = None

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


@dataclass(frozen=True)
class Selection:
    candidates: tuple[DeliveryCandidate, ...] = field(default_factory=tuple)
    reason: str | None = None

    def __bool__(self) -> bool:
        return bool(self.candidates)

    @property
    def mechanism_ids(self) -> list[str]:
        return [c.mechanism_id for c in self.candidates]


def _candidate(mechanism_id: str, command: str, args: list[str], timings: Mapping[str, MechanismTiming],
               escalate_to: DeliveryCandidate | None = None) -> DeliveryCandidate:
    t = timings[mechanism_id]
    return DeliveryCandidate(
        mechanism_id=mechanism_id,
        command=command,
        args=tuple(args),
        pre_delay=t.pre_delay,
        timeout=t.timeout,
        restore_delay=t.restore_delay,
        escalate_to=escalate_to,
    )


def applescript_candidate(timings: Mapping[str, MechanismTiming] = DEFAULT_TIMINGS) -> DeliveryCandidate:
    return _candidate(APPLESCRIPT, 'osascript', ['-e', APPLESCRIPT_PASTE], timings)


def powershell_candidate(timings: Mapping[str, MechanismTiming] = DEFAULT_TIMINGS) -> DeliveryCandidate:
    # Hidden window and no profile keep the startup cost and the flash down
    return _candidate(POWERSHELL, 'powershell.exe', [
        '-NoProfile',
        '-NonInteractive',
        '-WindowStyle', 'Hidden',
        '-ExecutionPolicy', 'Bypass',
        '-Command', POWERSHELL_PASTE,
    ], timings)


def nircmd_candidate(nircmd_path: str,
                     timings: Mapping[str, MechanismTiming] = DEFAULT_TIMINGS) -> DeliveryCandidate:
    return _candidate(NIRCMD, nircmd_path, ['sendkeypress', PASTE_CHORD], timings,
                      escalate_to=powershell_candidate(timings))


def wtype_args(terminal: bool) -> list[str]:
    """wtype has no chord shorthand: press modifiers, tap v, release in reverse."""
    if terminal:
        return ['-M', 'ctrl', '-M', 'shift', '-k', 'v', '-m', 'shift', '-m', 'ctrl']
    return ['-M', 'ctrl', '-k', 'v', '-m', 'ctrl']


def paste_chord(terminal: bool) -> str:
    return TERMINAL_PASTE_CHORD if terminal else PASTE_CHORD


def linux_tool_eligibility(session: SessionInfo, xdotool_exists: bool,
                           bridge_confirmed: bool) -> tuple[bool, bool]:
    """(can_use_wtype, can_use_xdotool) before the availability filter.

    GNOME's compositor does not implement the virtual-keyboard protocol,
    so wtype is useless there. Under Wayland xdotool only reaches XWayland
    windows, which is what ``bridge_confirmed`` proves.
    """
    can_use_wtype = session.is_wayland and not session.is_gnome
    can_use_xdotool = bridge_confirmed if session.is_wayland else xdotool_exists
    return can_use_wtype, can_use_xdotool


def select_candidates(
    session: SessionInfo,
    tools: Mapping[str, bool] | None = None,
    terminal: bool = False,
    *,
    bridge_confirmed: bool = False,
    permission_granted: bool = True,
    nircmd_path: str | None = None,
    timings: Mapping[str, MechanismTiming] = DEFAULT_TIMINGS,
) -> Selection:
    tools = tools or {}

    if session.platform == MACOS:
        if not permission_granted:
            return Selection(reason=REASON_PERMISSION_DENIED)
        return Selection(candidates=(applescript_candidate(timings),))

    if session.platform == WINDOWS:
        if nircmd_path:
            return Selection(candidates=(nircmd_candidate(nircmd_path, timings),))
        return Selection(candidates=(powershell_candidate(timings),))

    if session.platform != LINUX:
        return Selection()

    can_use_wtype, can_use_xdotool = linux_tool_eligibility(
        session, tools.get(XDOTOOL, False), bridge_confirmed)

    candidates = []
    if can_use_wtype:
        candidates.append(_candidate(WTYPE, 'wtype', wtype_args(terminal), timings))
    if can_use_xdotool:
        candidates.append(_candidate(XDOTOOL, 'xdotool', ['key', paste_chord(terminal)], timings))

    return Selection(candidates=tuple(c for c in candidates if tools.get(c.command, False)))

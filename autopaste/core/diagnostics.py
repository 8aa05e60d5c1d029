"""Actionable failure messages.

When every mechanism has failed the user gets the smallest fix that
would work for their exact session, e.g. "install wtype" rather than a
generic "paste failed".
"""

from __future__ import annotations

from dataclasses import dataclass

from autopaste.core.errors import (
    AllMechanismsExhausted,
    MechanismExitFailure,
    MechanismTimeout,
    PasteError,
    PermissionDenied,
    ToolUnavailable,
)
from autopaste.utils.desktop import MACOS, SessionInfo


@dataclass(frozen=True)
class LinuxContext:
    session: SessionInfo
    xdotool_exists: bool
    wtype_exists: bool
    xdotool_class: str | None = None


def recommended_linux_install(session: SessionInfo) -> str | None:
    """Package that would enable pasting when no tool is usable, if any."""
    if not session.is_wayland:
        return 'xdotool'
    if session.is_gnome:
        return 'xdotool' if session.xwayland_available else None
    return 'wtype'


def linux_failure(ctx: LinuxContext, failures: list[PasteError] | None = None) -> AllMechanismsExhausted:
    s = ctx.session
    missing: str | None = None

    if not s.is_wayland:
        message = "paste simulation failed on X11. Please install xdotool or paste manually with Ctrl+V."
        if not ctx.xdotool_exists:
            missing = 'xdotool'
    elif s.is_gnome:
        if not s.xwayland_available:
            message = "GNOME Wayland blocks automatic pasting. Please paste manually with Ctrl+V."
        elif not ctx.xdotool_exists:
            message = ("automatic pasting on GNOME Wayland requires xdotool for XWayland apps. "
                       "Please install xdotool or paste manually with Ctrl+V.")
            missing = 'xdotool'
        elif not ctx.xdotool_class:
            message = "the active app isn't running under XWayland. Please paste manually with Ctrl+V."
        else:
            message = "paste simulation failed via XWayland. Please paste manually with Ctrl+V."
    elif not ctx.wtype_exists:
        missing = 'wtype'
        if not s.xwayland_available:
            message = ("automatic pasting on Wayland requires wtype. "
                       "Please install wtype or paste manually with Ctrl+V.")
        elif not ctx.xdotool_exists:
            message = ("automatic pasting on Wayland requires wtype (Wayland apps) or xdotool "
                       "(XWayland apps). Please install one or paste manually with Ctrl+V.")
        elif not ctx.xdotool_class:
            message = ("the active app isn't running under XWayland. "
                       "Please install wtype for Wayland apps or paste manually with Ctrl+V.")
        else:
            message = "paste simulation failed via XWayland. Please paste manually with Ctrl+V."
            missing = None
    else:
        message = ("paste simulation failed on Wayland. Ensure your compositor supports the "
                   "virtual keyboard protocol or paste manually with Ctrl+V.")
        if s.xwayland_available and ctx.xdotool_exists:
            message += " If this is an XWayland app, xdotool can also be used."

    message = "Clipboard copied, but " + message
    if missing:
        return ToolUnavailable(message, package=missing, failures=failures)
    return AllMechanismsExhausted(message, failures=failures)


def permission_failure() -> PermissionDenied:
    return PermissionDenied(
        "Accessibility permissions required for automatic pasting. "
        "Text has been copied to clipboard - please paste manually with Cmd+V."
    )


def desktop_failure(platform: str, failures: list[PasteError]) -> AllMechanismsExhausted:
    """macOS/Windows: describe the last mechanism's failure."""
    keys = 'Cmd+V' if platform == MACOS else 'Ctrl+V'
    tail = f"Text is copied to clipboard - please paste manually with {keys}."
    last = failures[-1] if failures else None

    if isinstance(last, MechanismTimeout):
        message = f"Paste operation timed out. {tail}"
    elif isinstance(last, MechanismExitFailure) and last.spawn_failed:
        message = f"Paste command failed: {last.stderr or 'could not start'}. {tail}"
    elif isinstance(last, MechanismExitFailure) and platform == MACOS:
        message = f"Paste failed (code {last.returncode}). {tail}"
    elif isinstance(last, MechanismExitFailure):
        message = f"Windows paste failed with code {last.returncode}. {tail}"
    else:
        message = f"Automatic pasting is not available. {tail}"
    return AllMechanismsExhausted(message, failures=failures)

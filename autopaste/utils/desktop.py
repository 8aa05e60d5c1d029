"""Detection of the OS family, display server and desktop environment.

Everything here is a plain read of ``sys.platform`` and environment
variables. Nothing is cached: the session can change between pastes
(e.g. switching VTs or an SSH-forwarded DISPLAY appearing).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Mapping

MACOS = 'macos'
WINDOWS = 'windows'
LINUX = 'linux'


@dataclass(frozen=True)
class SessionInfo:
    platform: str
    is_wayland: bool = False
    xwayland_available: bool = False
    desktop_env: str = ''
    is_gnome: bool = False

    @property
    def display_server(self) -> str:
        return 'wayland' if self.is_wayland else 'x11'


def detect_platform(sys_platform: str | None = None) -> str:
    """
    Определяет семейство ОС

    Returns:
        str: 'macos', 'windows' или 'linux' (any other Unix counts as linux)
    """
    name = sys_platform if sys_platform is not None else sys.platform
    if name == 'darwin':
        return MACOS
    if name == 'win32':
        return WINDOWS
    return LINUX


def detect_desktop_environment(environ: Mapping[str, str] | None = None) -> str:
    """All desktop identifiers, lower-cased and joined with ':'.

    ``XDG_CURRENT_DESKTOP`` alone is not enough: some sessions only set
    ``XDG_SESSION_DESKTOP`` or ``DESKTOP_SESSION``.
    """
    env = os.environ if environ is None else environ
    parts = [
        env.get('XDG_CURRENT_DESKTOP', ''),
        env.get('XDG_SESSION_DESKTOP', ''),
        env.get('DESKTOP_SESSION', ''),
    ]
    return ':'.join(p for p in parts if p).lower()


def detect_display_server(environ: Mapping[str, str] | None = None) -> str:
    """
    Определяет используемый display server

    Returns:
        str: 'wayland' или 'x11'
    """
    env = os.environ if environ is None else environ
    session_type = env.get('XDG_SESSION_TYPE', '').lower()
    wayland_display = env.get('WAYLAND_DISPLAY', '')

    if session_type == 'wayland' or wayland_display:
        return 'wayland'

    return 'x11'


def get_session_info(
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> SessionInfo:
    """Snapshot of the current session. Missing variables mean X11, not Gnome."""
    env = os.environ if environ is None else environ
    plat = platform or detect_platform()
    if plat != LINUX:
        return SessionInfo(platform=plat)

    is_wayland = detect_display_server(env) == 'wayland'
    desktop_env = detect_desktop_environment(env)
    return SessionInfo(
        platform=plat,
        is_wayland=is_wayland,
        xwayland_available=is_wayland and bool(env.get('DISPLAY')),
        desktop_env=desktop_env,
        is_gnome=is_wayland and 'gnome' in desktop_env,
    )

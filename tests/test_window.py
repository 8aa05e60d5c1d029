"""Tests for terminal detection of the focused window."""

from __future__ import annotations

import pytest

from autopaste.core.tools import ToolAvailabilityCache
from autopaste.core.window import FocusedWindowClassifier, is_terminal_class
from autopaste.utils.desktop import get_session_info
from tests.conftest import GNOME_WAYLAND_ENV, KDE_WAYLAND_ENV, X11_ENV, fail, hang, ok, spawn_error

XDOTOOL_CLASS = ['xdotool', 'getactivewindow', 'getwindowclassname']


def _classifier(fake_system, fake_clock):
    return FocusedWindowClassifier(fake_system, ToolAvailabilityCache(fake_system, clock=fake_clock))


class TestIsTerminalClass:
    @pytest.mark.parametrize("window_class", [
        'konsole', 'org.kde.konsole', 'Gnome-terminal-server', 'XTerm', 'kitty', 'Alacritty',
    ])
    def test_known_terminals(self, window_class):
        assert is_terminal_class(window_class) is True

    @pytest.mark.parametrize("window_class", ['firefox', 'code', 'libreoffice-writer', '', None])
    def test_other_windows(self, window_class):
        assert is_terminal_class(window_class) is False


class TestFocusedWindowClassifier:
    @pytest.mark.asyncio
    async def test_x11_terminal_via_xdotool(self, fake_system, fake_clock):
        fake_system.install('xdotool')
        fake_system.respond(XDOTOOL_CLASS, ok("Gnome-terminal\n"))
        probe = await _classifier(fake_system, fake_clock).probe(get_session_info(X11_ENV, 'linux'))
        assert probe.is_terminal is True
        assert probe.window_class == 'gnome-terminal'
        assert probe.xdotool_class == 'gnome-terminal'

    @pytest.mark.asyncio
    async def test_x11_browser(self, fake_system, fake_clock):
        fake_system.install('xdotool')
        fake_system.respond(XDOTOOL_CLASS, ok("firefox\n"))
        classifier = _classifier(fake_system, fake_clock)
        assert await classifier.is_terminal_focused(get_session_info(X11_ENV, 'linux')) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [fail(1), spawn_error(), hang(), ok("")])
    async def test_probe_failure_is_not_terminal(self, fake_system, fake_clock, result):
        fake_system.install('xdotool')
        fake_system.respond(XDOTOOL_CLASS, result)
        probe = await _classifier(fake_system, fake_clock).probe(get_session_info(X11_ENV, 'linux'))
        assert probe.is_terminal is False
        assert probe.window_class is None

    @pytest.mark.asyncio
    async def test_wayland_without_bridge_skips_xdotool(self, fake_system, fake_clock):
        fake_system.install('xdotool')
        session = get_session_info(GNOME_WAYLAND_ENV, 'linux')
        probe = await _classifier(fake_system, fake_clock).probe(session)
        assert fake_system.commands('xdotool') == []
        assert probe.window_class is None

    @pytest.mark.asyncio
    async def test_kdotool_two_step_query(self, fake_system, fake_clock):
        fake_system.install('kdotool')
        fake_system.respond(['kdotool', 'getactivewindow'], ok("{a1b2}\n"))
        fake_system.respond(['kdotool', 'getwindowclassname'], ok("org.kde.Konsole\n"))
        session = get_session_info(KDE_WAYLAND_ENV, 'linux')
        probe = await _classifier(fake_system, fake_clock).probe(session)
        assert probe.is_terminal is True
        assert probe.source == 'kdotool'
        # kdotool sees native Wayland windows, so it is no proof of a live bridge
        assert probe.xdotool_class is None
        assert fake_system.commands('kdotool')[-1] == ['kdotool', 'getwindowclassname', '{a1b2}']

    @pytest.mark.asyncio
    async def test_kdotool_window_id_failure(self, fake_system, fake_clock):
        fake_system.install('kdotool')
        fake_system.respond(['kdotool', 'getactivewindow'], fail(1))
        session = get_session_info(KDE_WAYLAND_ENV, 'linux')
        assert await _classifier(fake_system, fake_clock).is_terminal_focused(session) is False
        assert len(fake_system.commands('kdotool')) == 1

    @pytest.mark.asyncio
    async def test_xdotool_class_wins_over_kdotool(self, fake_system, fake_clock):
        fake_system.install('xdotool', 'kdotool')
        fake_system.respond(XDOTOOL_CLASS, ok("code\n"))
        session = get_session_info(KDE_WAYLAND_ENV, 'linux')
        probe = await _classifier(fake_system, fake_clock).probe(session)
        assert probe.source == 'xdotool'
        assert fake_system.commands('kdotool') == []

    @pytest.mark.asyncio
    async def test_no_tools_at_all(self, fake_system, fake_clock):
        session = get_session_info(X11_ENV, 'linux')
        assert await _classifier(fake_system, fake_clock).is_terminal_focused(session) is False
        assert fake_system.commands('xdotool') == []

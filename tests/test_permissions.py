"""Tests for the macOS Accessibility gate and its remediation dialog."""

from __future__ import annotations

import pytest

from autopaste.core.event_bus import EventBus
from autopaste.core.events import EventType
from autopaste.core.permissions import PROBE_SCRIPT, PermissionGatekeeper, is_stuck_permission
from autopaste.core.remediation import (
    SETTINGS_COMMANDS,
    AccessibilityRemediation,
    build_dialog_message,
)
from tests.conftest import fail, hang, ok, spawn_error


def _gate(fake_system, fake_clock, bus=None, platform='macos'):
    return PermissionGatekeeper(fake_system, bus=bus, ttl=30, clock=fake_clock, platform=platform)


class TestPermissionGatekeeper:
    @pytest.mark.asyncio
    async def test_non_macos_is_always_granted(self, fake_system, fake_clock):
        gate = _gate(fake_system, fake_clock, platform='linux')
        assert await gate.check_permission() is True
        assert fake_system.calls == []

    @pytest.mark.asyncio
    async def test_probe_success_grants(self, fake_system, fake_clock):
        gate = _gate(fake_system, fake_clock)
        assert gate.state is None
        assert await gate.check_permission() is True
        assert fake_system.commands('osascript') == [['osascript', '-e', PROBE_SCRIPT]]
        assert gate.state is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [fail(1, "execution error"), spawn_error(), hang()])
    async def test_any_probe_failure_denies(self, fake_system, fake_clock, result):
        fake_system.respond(['osascript'], result)
        gate = _gate(fake_system, fake_clock)
        assert await gate.check_permission() is False
        assert gate.state is False

    @pytest.mark.asyncio
    async def test_cache_hit_spawns_nothing(self, fake_system, fake_clock):
        gate = _gate(fake_system, fake_clock)
        await gate.check_permission()
        fake_clock.advance(29)
        await gate.check_permission()
        assert len(fake_system.commands('osascript')) == 1

    @pytest.mark.asyncio
    async def test_reprobes_after_ttl(self, fake_system, fake_clock):
        fake_system.respond(['osascript'], fail(1), ok())
        gate = _gate(fake_system, fake_clock)
        assert await gate.check_permission() is False
        fake_clock.advance(30)
        assert await gate.check_permission() is True

    @pytest.mark.asyncio
    async def test_denial_event_once_per_probe(self, fake_system, fake_clock):
        bus = EventBus()
        events = []
        bus.subscribe(EventType.PERMISSION_DENIED, events.append)
        fake_system.respond(['osascript'], fail(1, "osascript is not allowed assistive access. (-1719)"))
        gate = _gate(fake_system, fake_clock, bus=bus)

        await gate.check_permission()
        await gate.check_permission()
        await gate.check_permission()
        assert len(events) == 1
        assert events[0].data.stuck is True

        fake_clock.advance(31)
        await gate.check_permission()
        assert len(events) == 2


def test_stuck_permission_markers():
    assert is_stuck_permission("System Events got an error: (-25006)")
    assert not is_stuck_permission("execution error: User canceled. (-128)")


class TestAccessibilityRemediation:
    def test_messages_mention_app_name(self):
        assert 'Whispr' in build_dialog_message('Whispr', stuck=False)
        stuck = build_dialog_message('Whispr', stuck=True)
        assert 'Remove any old "Whispr" entries' in stuck

    @pytest.mark.asyncio
    async def test_confirm_opens_privacy_pane(self, fake_system):
        remediation = AccessibilityRemediation(fake_system, app_name='Demo')
        assert await remediation.show_dialog() is True
        assert fake_system.commands('open') == [SETTINGS_COMMANDS[0]]

    @pytest.mark.asyncio
    async def test_dialog_quotes_are_escaped(self, fake_system):
        remediation = AccessibilityRemediation(fake_system, app_name='Say "hi"')
        await remediation.show_dialog()
        script = fake_system.commands('osascript')[0][2]
        assert 'Say \\"hi\\"' in script
        assert script.endswith('default button "Open System Settings"')

    @pytest.mark.asyncio
    async def test_cancel_opens_nothing(self, fake_system):
        fake_system.respond(['osascript'], fail(1, "User canceled. (-128)"))
        remediation = AccessibilityRemediation(fake_system)
        assert await remediation.show_dialog() is False
        assert fake_system.commands('open') == []

    @pytest.mark.asyncio
    async def test_falls_through_settings_commands(self, fake_system):
        fake_system.respond(SETTINGS_COMMANDS[0], fail(1))
        fake_system.respond(SETTINGS_COMMANDS[1], spawn_error())
        remediation = AccessibilityRemediation(fake_system)
        assert await remediation.open_system_settings() is True
        assert fake_system.commands('open') == SETTINGS_COMMANDS[:3]

    @pytest.mark.asyncio
    async def test_all_settings_commands_failing_does_not_raise(self, fake_system):
        fake_system.respond(['open'], fail(1))
        remediation = AccessibilityRemediation(fake_system)
        assert await remediation.open_system_settings() is False
        assert len(fake_system.commands('open')) == len(SETTINGS_COMMANDS)

    @pytest.mark.asyncio
    async def test_attached_to_bus_runs_in_background(self, fake_system, fake_clock):
        bus = EventBus()
        remediation = AccessibilityRemediation(fake_system)
        remediation.attach(bus)
        fake_system.respond(['osascript', '-e', PROBE_SCRIPT], fail(1))
        gate = _gate(fake_system, fake_clock, bus=bus)

        assert await gate.check_permission() is False
        await remediation.wait_idle()
        dialogs = [c for c in fake_system.commands('osascript') if c[2].startswith('display dialog')]
        assert len(dialogs) == 1

    def test_handle_without_loop_is_noop(self, fake_system):
        from autopaste.core.events import Event, PermissionDeniedData

        remediation = AccessibilityRemediation(fake_system)
        remediation.handle(Event(EventType.PERMISSION_DENIED, PermissionDeniedData('', False)))
        assert fake_system.calls == []

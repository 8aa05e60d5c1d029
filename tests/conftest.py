"""Shared fakes: no test spawns xdotool, osascript or touches the real clipboard."""

from __future__ import annotations

import pytest

from autopaste.platform.clipboard import IClipboard
from autopaste.platform.system_adapter import CommandResult, ISystemAdapter


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


def fail(returncode: int = 1, stderr: str = "") -> CommandResult:
    return CommandResult(stdout="", stderr=stderr, returncode=returncode)


def hang() -> CommandResult:
    return CommandResult(stdout="", stderr="timeout", returncode=-1, timed_out=True)


def spawn_error(message: str = "[Errno 2] No such file or directory") -> CommandResult:
    return CommandResult(stdout="", stderr=message, returncode=-1)


class FakeSystemAdapter(ISystemAdapter):
    """Scripted command runner.

    Commands are answered by the longest matching argv prefix registered
    with ``respond``; a list of results is consumed in order and its last
    item repeats. Without a match, ``sh -c "command -v ..."`` lookups
    succeed only for names in ``installed`` and anything else succeeds
    with empty output.
    """

    def __init__(self) -> None:
        self.installed: set[str] = set()
        self.calls: list[tuple[list[str], float]] = []
        self._responses: dict[tuple[str, ...], list[CommandResult]] = {}

    def install(self, *names: str) -> None:
        self.installed.update(names)

    def respond(self, prefix, *results: CommandResult) -> None:
        self._responses[tuple(prefix)] = list(results)

    async def run_command(self, args: list[str], timeout: float = 1.0) -> CommandResult:
        args = list(args)
        self.calls.append((args, timeout))

        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if tuple(args[:len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is not None:
            queue = self._responses[best]
            return queue.pop(0) if len(queue) > 1 else queue[0]

        if args[:2] == ['sh', '-c'] and args[2].startswith('command -v '):
            name = args[2][len('command -v '):]
            return ok(f"/usr/bin/{name}\n") if name in self.installed else fail()
        return ok()

    def commands(self, name: str | None = None) -> list[list[str]]:
        """argv of every call, optionally only those running *name*."""
        return [args for args, _ in self.calls if name is None or args[0] == name]

    @property
    def lookups(self) -> list[str]:
        return [args[2] for args, _ in self.calls if args[:2] == ['sh', '-c']]


class FakeClipboard(IClipboard):
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.writes: list[str] = []

    async def read_text(self) -> str:
        return self.text

    async def write_text(self, text: str) -> None:
        self.text = text
        self.writes.append(text)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Drop-in for asyncio.sleep that returns at once and remembers delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_system() -> FakeSystemAdapter:
    return FakeSystemAdapter()


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard("original clipboard")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


X11_ENV = {'XDG_SESSION_TYPE': 'x11', 'DISPLAY': ':0', 'XDG_CURRENT_DESKTOP': 'KDE'}
KDE_WAYLAND_ENV = {'XDG_SESSION_TYPE': 'wayland', 'WAYLAND_DISPLAY': 'wayland-0',
                   'DISPLAY': ':0', 'XDG_CURRENT_DESKTOP': 'KDE'}
GNOME_WAYLAND_ENV = {'XDG_SESSION_TYPE': 'wayland', 'WAYLAND_DISPLAY': 'wayland-0',
                     'XDG_CURRENT_DESKTOP': 'ubuntu:GNOME'}


@pytest.fixture
def make_manager(fake_system, fake_clipboard, fake_clock, sleep_recorder):
    """Factory for a PasteManager wired to the fakes."""
    from autopaste.manager import PasteManager

    def _make(platform: str = 'linux', environ: dict | None = None, config: dict | None = None,
              real_sleep: bool = False) -> PasteManager:
        kwargs = {}
        if not real_sleep:
            kwargs['sleep'] = sleep_recorder
        return PasteManager(
            config=config if config is not None else {},
            system=fake_system,
            clipboard=fake_clipboard,
            clock=fake_clock,
            platform=platform,
            environ=environ if environ is not None else X11_ENV,
            **kwargs,
        )

    return _make

"""Typed exception hierarchy for AutoPaste.

Per-mechanism failures (``MechanismTimeout``, ``MechanismExitFailure``) are
collected by the executor and never reach the caller on their own. The
caller only sees ``ClipboardError`` or one of the terminal
``AllMechanismsExhausted`` flavours.
"""

from __future__ import annotations


class PasteError(Exception):
    """Base class for all AutoPaste errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ClipboardError(PasteError):
    """Raised when the clipboard backend cannot be read or written."""


class MechanismTimeout(PasteError):
    """A delivery mechanism did not exit within its timeout and was killed."""

    def __init__(self, mechanism_id: str, timeout: float) -> None:
        self.mechanism_id = mechanism_id
        self.timeout = timeout
        super().__init__(f"Paste with {mechanism_id} timed out after {timeout:g} seconds")


class MechanismExitFailure(PasteError):
    """A delivery mechanism exited nonzero, or could not be spawned (returncode -1)."""

    def __init__(self, mechanism_id: str, returncode: int, stderr: str = "") -> None:
        self.mechanism_id = mechanism_id
        self.returncode = returncode
        self.stderr = stderr
        if returncode == -1:
            message = f"{mechanism_id} could not be started: {stderr or 'unknown error'}"
        else:
            message = f"{mechanism_id} exited with code {returncode}"
        super().__init__(message)

    @property
    def spawn_failed(self) -> bool:
        return self.returncode == -1


class AllMechanismsExhausted(PasteError):
    """Terminal failure: no mechanism delivered the paste.

    The text stays on the clipboard so the user can paste manually.
    """

    text_on_clipboard = True

    def __init__(
        self,
        message: str,
        failures: list[PasteError] | None = None,
        recommended_install: str | None = None,
    ) -> None:
        self.failures = list(failures or [])
        self.recommended_install = recommended_install
        super().__init__(message)


class PermissionDenied(AllMechanismsExhausted):
    """macOS Accessibility permission is missing; no keystroke can be simulated."""


class ToolUnavailable(AllMechanismsExhausted):
    """A Linux key-injection tool that would make pasting possible is not installed."""

    def __init__(
        self,
        message: str,
        package: str,
        failures: list[PasteError] | None = None,
    ) -> None:
        self.package = package
        super().__init__(message, failures=failures, recommended_install=package)

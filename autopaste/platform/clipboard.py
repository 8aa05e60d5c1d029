"""Clipboard access for the paste round-trip.

``pyperclip`` picks the platform backend (pbcopy/pbpaste, the Win32
clipboard API, wl-clipboard/xclip/xsel). Its calls block on a helper
process, so they run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

import pyperclip

from autopaste.core.errors import ClipboardError
from autopaste.log import preview

logger = logging.getLogger(__name__)


class IClipboard(ABC):
    @abstractmethod
    async def read_text(self) -> str: ...

    @abstractmethod
    async def write_text(self, text: str) -> None: ...


class PyperclipClipboard(IClipboard):
    """System clipboard through pyperclip."""

    async def read_text(self) -> str:
        try:
            text = await asyncio.to_thread(pyperclip.paste)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Could not read the clipboard: {e}") from e
        return text or ""

    async def write_text(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Could not write the clipboard: {e}") from e
        logger.trace("Clipboard set to %r", preview(text))  # type: ignore[attr-defined]

"""Tests for the pyperclip-backed clipboard."""

from __future__ import annotations

import pyperclip
import pytest

from autopaste.core.errors import ClipboardError
from autopaste.platform.clipboard import PyperclipClipboard


@pytest.fixture
def memory_clipboard(monkeypatch):
    store = {'text': "before"}
    monkeypatch.setattr(pyperclip, 'paste', lambda: store['text'])
    monkeypatch.setattr(pyperclip, 'copy', lambda text: store.__setitem__('text', text))
    return store


@pytest.fixture
def broken_clipboard(monkeypatch):
    def boom(*args):
        raise pyperclip.PyperclipException("could not find a copy/paste mechanism")

    monkeypatch.setattr(pyperclip, 'paste', boom)
    monkeypatch.setattr(pyperclip, 'copy', boom)


class TestPyperclipClipboard:
    @pytest.mark.asyncio
    async def test_read_and_write(self, memory_clipboard):
        clipboard = PyperclipClipboard()
        assert await clipboard.read_text() == "before"
        await clipboard.write_text("after")
        assert memory_clipboard['text'] == "after"

    @pytest.mark.asyncio
    async def test_none_reads_as_empty(self, memory_clipboard):
        memory_clipboard['text'] = None
        assert await PyperclipClipboard().read_text() == ""

    @pytest.mark.asyncio
    async def test_read_error_is_clipboard_error(self, broken_clipboard):
        with pytest.raises(ClipboardError, match="read"):
            await PyperclipClipboard().read_text()

    @pytest.mark.asyncio
    async def test_write_error_is_clipboard_error(self, broken_clipboard):
        with pytest.raises(ClipboardError, match="write"):
            await PyperclipClipboard().write_text("x")

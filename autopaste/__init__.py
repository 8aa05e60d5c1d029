"""AutoPaste — deliver clipboard text into the focused application.

Usage:
    from autopaste import PasteManager
    manager = PasteManager()
    await manager.paste_text("hello")
"""

import autopaste.log  # noqa: F401  registers the TRACE level

from autopaste.__version__ import __version__
from autopaste.core.errors import (
    AllMechanismsExhausted,
    ClipboardError,
    MechanismExitFailure,
    MechanismTimeout,
    PasteError,
    PermissionDenied,
    ToolUnavailable,
)
from autopaste.manager import PasteManager, PasteResult, PasteToolsStatus

__all__ = [
    '__version__',
    'AllMechanismsExhausted',
    'ClipboardError',
    'MechanismExitFailure',
    'MechanismTimeout',
    'PasteError',
    'PasteManager',
    'PasteResult',
    'PasteToolsStatus',
    'PermissionDenied',
    'ToolUnavailable',
]

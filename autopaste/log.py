"""Logging helpers for AutoPaste.

Levels (ascending):
    TRACE =  5  — raw probe output (window classes, command -v results)
    DEBUG = 10  — candidate lists, per-mechanism attempts, cache hits
    INFO  = 20  — delivered pastes, clipboard restores

Usage:
    import autopaste.log  # must be imported once before any logger is used
    logger = logging.getLogger(__name__)
    logger.trace("very noisy message")

Clipboard text never goes to the log in full: use ``preview(text)``.
"""

from __future__ import annotations

import logging

TRACE: int = 5
PREVIEW_LIMIT: int = 50

logging.addLevelName(TRACE, "TRACE")


def _trace(self: logging.Logger, message: object, *args: object, **kwargs: object) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)  # type: ignore[attr-defined]


# Patch Logger class once at import time
logging.Logger.trace = _trace  # type: ignore[attr-defined]


def preview(text: str | None, limit: int = PREVIEW_LIMIT) -> str:
    """Return *text* cut to *limit* characters, with an ellipsis when cut."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."

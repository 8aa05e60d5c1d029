"""Typed event definitions (dataclasses)."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class EventType(Enum):
    # Paste lifecycle
    PASTE_STARTED = auto()
    MECHANISM_FAILED = auto()
    PASTE_COMPLETE = auto()
    PASTE_FAILED = auto()
    CLIPBOARD_RESTORED = auto()
    # macOS Accessibility
    PERMISSION_DENIED = auto()


@dataclass
class Event:
    type: EventType
    data: Any
    timestamp: float = field(default_factory=time.time)


@dataclass
class PermissionDeniedData:
    stderr: str
    stuck: bool         # stale grant from a previous build of the host app


@dataclass
class MechanismFailedData:
    mechanism_id: str
    error: str
    escalating_to: str | None = None


@dataclass
class PasteOutcomeData:
    platform: str
    method: str | None
    elapsed: float
    text_length: int
    error: str | None = None

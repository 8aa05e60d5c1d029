"""Delivery executor — try each candidate until one pastes.

One combinator serves every platform: wait the candidate's pre-delay,
run it under its timeout, and on failure move on to its ``escalate_to``
candidate if it has one, otherwise to the next list entry.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

from autopaste.core.errors import (
    AllMechanismsExhausted,
    MechanismExitFailure,
    MechanismTimeout,
    PasteError,
)
from autopaste.core.event_bus import EventBus
from autopaste.core.events import EventType, MechanismFailedData
from autopaste.core.strategy import DeliveryCandidate
from autopaste.platform.system_adapter import ISystemAdapter

logger = logging.getLogger(__name__)

Diagnose = Callable[[list[PasteError]], AllMechanismsExhausted]


@dataclass
class ExecutionResult:
    candidate: DeliveryCandidate
    failures: list[PasteError] = field(default_factory=list)
    elapsed: float = 0.0


def _default_diagnose(failures: list[PasteError]) -> AllMechanismsExhausted:
    detail = failures[-1].message if failures else "no paste mechanism available"
    return AllMechanismsExhausted(
        f"Paste failed ({detail}). Text is copied to clipboard - please paste manually.",
        failures=failures,
    )


class DeliveryExecutor:
    def __init__(
        self,
        system: ISystemAdapter,
        bus: EventBus | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._system = system
        self._bus = bus
        self._sleep = sleep

    async def attempt(self, candidate: DeliveryCandidate) -> None:
        """Run one candidate; raise MechanismTimeout/MechanismExitFailure on failure."""
        if candidate.pre_delay > 0:
            await self._sleep(candidate.pre_delay)

        started = time.monotonic()
        result = await self._system.run_command(candidate.argv, timeout=candidate.timeout)
        elapsed = time.monotonic() - started

        if result.timed_out:
            raise MechanismTimeout(candidate.mechanism_id, candidate.timeout)
        if result.returncode != 0:
            raise MechanismExitFailure(candidate.mechanism_id, result.returncode, result.stderr.strip())
        logger.debug("%s succeeded in %.0fms", candidate.mechanism_id, elapsed * 1000)

    async def execute(
        self,
        candidates: Sequence[DeliveryCandidate],
        diagnose: Diagnose | None = None,
    ) -> ExecutionResult:
        started = time.monotonic()
        failures: list[PasteError] = []
        pending = deque(candidates)

        while pending:
            candidate = pending.popleft()
            try:
                await self.attempt(candidate)
            except (MechanismTimeout, MechanismExitFailure) as exc:
                failures.append(exc)
                escalation = candidate.escalate_to
                if escalation is not None:
                    pending.appendleft(escalation)
                    logger.info("%s failed (%s), falling back to %s",
                                candidate.mechanism_id, exc.message, escalation.mechanism_id)
                else:
                    logger.warning("Paste with %s failed: %s", candidate.mechanism_id, exc.message)
                if self._bus is not None:
                    self._bus.emit(EventType.MECHANISM_FAILED, MechanismFailedData(
                        mechanism_id=candidate.mechanism_id,
                        error=exc.message,
                        escalating_to=escalation.mechanism_id if escalation else None,
                    ))
                continue
            return ExecutionResult(candidate=candidate, failures=failures,
                                   elapsed=time.monotonic() - started)

        raise (diagnose or _default_diagnose)(failures)

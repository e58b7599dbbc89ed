"""
keeper_core.context
-------------------
Per-operation deadline and cancellation token.

The orchestrator checks the context before its remote step and before its
local step; the HTTP remote store also bounds each request with
``remaining()``.
"""

from __future__ import annotations
from typing import Optional
import threading, time
from .errors import OperationCancelled


class OperationContext:
    def __init__(self, deadline: Optional[float] = None):
        # deadline is a time.monotonic() value
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "OperationContext":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self, step: str = "") -> None:
        where = f" before {step}" if step else ""
        if self.cancelled:
            raise OperationCancelled(f"operation cancelled{where}")
        if self.expired():
            raise OperationCancelled(f"deadline exceeded{where}")


def check(ctx: Optional[OperationContext], step: str = "") -> None:
    if ctx is not None:
        ctx.check(step)

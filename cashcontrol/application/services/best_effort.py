# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Side effects whose failure must never fail the surrounding request."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from cashcontrol.shared.errors.base import AppError
from cashcontrol.shared.logging import logger

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class BestEffortOutcome(Generic[T]):
    ok: bool
    value: T | None = None
    error: Exception | None = None


@dataclass(slots=True, frozen=True)
class BestEffortTask(Generic[T]):
    """A named call that is attempted once; failures are logged, not raised."""

    name: str
    action: Callable[[], T]
    level: str = "WARNING"

    def run(self) -> BestEffortOutcome[T]:
        try:
            value = self.action()
        except Exception as exc:
            reason = exc.code if isinstance(exc, AppError) else type(exc).__name__
            logger.log(self.level, f"{self.name}: failed reason={reason}")
            return BestEffortOutcome(ok=False, error=exc)
        return BestEffortOutcome(ok=True, value=value)


__all__ = ["BestEffortOutcome", "BestEffortTask"]

"""Retry policy for upstream model calls.

Errors are sorted into kinds by a predicate and every kind has its own
attempt budget. The wait before retry ``k`` is ``k * delay_unit``.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx
from pydantic_ai.exceptions import ModelHTTPError

from aicompass.config import Config
from aicompass.log import logger

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    PERMANENT = "permanent"


OVERLOADED_STATUS_CODES = frozenset({503, 529})
RATE_LIMITED_STATUS_CODES = frozenset({429})


def classify_error(error: BaseException) -> ErrorKind:
    if isinstance(error, ModelHTTPError):
        if error.status_code in OVERLOADED_STATUS_CODES:
            return ErrorKind.TRANSIENT
        if error.status_code in RATE_LIMITED_STATUS_CODES:
            return ErrorKind.RATE_LIMITED
        return ErrorKind.PERMANENT
    if isinstance(error, httpx.TransportError):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT


@dataclass
class RetryPolicy:
    attempts: dict[ErrorKind, int] = field(
        default_factory=lambda: {
            ErrorKind.TRANSIENT: 3,
            ErrorKind.RATE_LIMITED: 1,
            ErrorKind.PERMANENT: 1,
        }
    )
    delay_unit: float = 0.5
    classify: Callable[[BaseException], ErrorKind] = classify_error
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def from_config(cls, config: Config) -> RetryPolicy:
        return cls(
            attempts={
                ErrorKind.TRANSIENT: config.retry_max_attempts,
                ErrorKind.RATE_LIMITED: config.retry_rate_limited_attempts,
                ErrorKind.PERMANENT: 1,
            },
            delay_unit=config.retry_delay_unit,
        )

    async def call(self, fn: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await fn()
            except Exception as e:
                kind = self.classify(e)
                if attempt >= self.attempts.get(kind, 1):
                    raise
                delay = attempt * self.delay_unit
                logger.warning(f"Upstream call failed ({kind.value}, attempt {attempt}), retrying in {delay}s: {e}")
                await self.sleep(delay)

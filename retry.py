"""
Bounded exponential backoff around a single provider call.

Delay before retry n (0-based) is min(base_delay * 2**n, max_delay). No
jitter: the schedule is deterministic so worst-case latency is predictable.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import config
from providers.errors import AuthenticationFailure, InspectionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0         # seconds
    max_delay: float = 5.0          # seconds
    retry_auth_failures: bool = False

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        return cls(
            max_retries=config.RETRY_MAX_RETRIES,
            base_delay=config.RETRY_BASE_DELAY,
            max_delay=config.RETRY_MAX_DELAY,
            retry_auth_failures=config.RETRY_AUTH_FAILURES,
        )

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    def should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, AuthenticationFailure):
            return self.retry_auth_failures
        if isinstance(exc, InspectionError):
            return exc.retriable
        # Unknown failures are treated as transient
        return True

    async def execute(self, operation: Callable[[], Awaitable[T]], label: str = "call") -> T:
        """
        Run `operation` up to max_retries + 1 times.
        The last failure propagates unchanged.
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as exc:
                if attempt >= self.max_retries or not self.should_retry(exc):
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s failed (attempt %d/%d): %s — retrying in %.1fs",
                    label, attempt + 1, self.max_retries + 1, exc, delay,
                )
                await asyncio.sleep(delay)
                attempt += 1

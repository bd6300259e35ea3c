"""
Bounded linear-backoff retries for transient upstream failures.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Optional, TypeVar

from ..config import settings
from .errors import UpstreamTransientError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    delay_seconds: float = 1.0

    def get_delay(self, attempt: int) -> float:
        """Delay before the retry that follows ``attempt`` (0-based)."""
        return max(self.delay_seconds * (attempt + 1), 0)

    @classmethod
    def from_settings(cls) -> "RetryConfig":
        return cls(
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_backoff_seconds,
        )


async def retry_transient(
    operation: Callable[[], Coroutine[Any, Any, T]],
    config: Optional[RetryConfig] = None,
    *,
    description: str = "upstream call",
) -> T:
    """Run ``operation``, retrying only ``UpstreamTransientError``.

    Any other exception propagates on the first occurrence. Once attempts are
    exhausted the last transient error is re-raised.
    """
    config = config or RetryConfig.from_settings()
    attempts = max(config.max_attempts, 1)

    for attempt in range(attempts):
        try:
            return await operation()
        except UpstreamTransientError as exc:
            if attempt >= attempts - 1:
                raise
            delay = exc.retry_after if exc.retry_after is not None else config.get_delay(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %.1fs",
                description,
                attempt + 1,
                attempts,
                exc,
                delay,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("All retry attempts exhausted")  # pragma: no cover

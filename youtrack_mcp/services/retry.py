"""
RetryEngine - Classification-driven retries around an async operation.

Transient YouTrackErrors are retried on a fixed backoff schedule; semantic
errors are raised immediately since retrying cannot fix them. The final error
is re-raised with retry_count set so callers know further retries are futile.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from loguru import logger

from youtrack_mcp.services.cancellation import (
    CancelSignal,
    is_cancelled,
    sleep_unless_cancelled,
)
from youtrack_mcp.services.errors import RequestCancelledError, YouTrackError
from youtrack_mcp.services.health import HealthMonitor

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Delays between successive attempts. len(delays) = max retry count."""

    delays: tuple[float, ...] = (0.5, 1.5)

    @property
    def max_retries(self) -> int:
        return len(self.delays)


DEFAULT_RETRY_POLICY = RetryPolicy()


class RetryEngine:
    """
    Runs an operation with up to ``policy.max_retries`` retries.

    Usage:
        engine = RetryEngine(HealthMonitor(base_url))
        data = await engine.run(lambda: fetch(url), signal)
    """

    def __init__(
        self,
        health: HealthMonitor,
        policy: RetryPolicy | None = None,
    ):
        self.health = health
        self.policy = policy or DEFAULT_RETRY_POLICY

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        signal: CancelSignal | None = None,
    ) -> T:
        attempt = 0
        while True:
            if is_cancelled(signal):
                raise RequestCancelledError()

            try:
                result = await operation()
            except RequestCancelledError:
                raise
            except Exception as e:
                transient = isinstance(e, YouTrackError) and e.is_transient
                has_retries = attempt < self.policy.max_retries

                if transient and has_retries:
                    if is_cancelled(signal):
                        raise RequestCancelledError() from e

                    delay = self.policy.delays[attempt]
                    logger.debug(
                        f"Transient failure (attempt {attempt + 1}), "
                        f"retrying in {delay}s: {e}"
                    )
                    await sleep_unless_cancelled(delay, signal)
                    attempt += 1
                    continue

                self.health.record_failure(e)

                if isinstance(e, YouTrackError) and attempt > 0:
                    raise e.with_retry_count(attempt) from e
                raise

            self.health.record_success()
            return result

"""
HealthMonitor - Tracks consecutive transient failures against one YouTrack origin.

Counter rules:
- Transient failure (network, timeout, 408/425/429/5xx): increment
- Success: reset
- Semantic failure (definite 4xx): reset, the instance is reachable
- Cancellation: unchanged, the caller gave up

Notifications fire once per threshold crossing:
- 3 consecutive transient failures → warning ("appears unstable")
- 5 consecutive transient failures → error ("appears unreachable")
"""

from datetime import datetime
from typing import Any, Callable, Literal

from loguru import logger

from youtrack_mcp.services.errors import RequestCancelledError, YouTrackError

DegradationLevel = Literal["warning", "error"]
DegradationCallback = Callable[[DegradationLevel, str], None]

DEGRADATION_THRESHOLDS: tuple[tuple[int, DegradationLevel], ...] = (
    (3, "warning"),
    (5, "error"),
)


class HealthMonitor:
    """
    Consecutive-failure tracker for a single origin.

    Usage:
        health = HealthMonitor("https://yt.example.com")
        health.on_degradation = lambda level, msg: print(level, msg)

        try:
            result = await make_request()
            health.record_success()
        except YouTrackError as e:
            health.record_failure(e)
            raise
    """

    def __init__(
        self,
        base_url: str,
        on_degradation: DegradationCallback | None = None,
    ):
        self.base_url = base_url
        self.on_degradation = on_degradation

        self._consecutive_failures = 0
        self._last_failure: str | None = None
        self._last_failure_time: datetime | None = None

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def is_degraded(self) -> bool:
        return self._consecutive_failures >= DEGRADATION_THRESHOLDS[0][0]

    def record_success(self) -> None:
        """Record a successful request."""
        if self._consecutive_failures:
            logger.info(
                f"YouTrack recovered after {self._consecutive_failures} "
                f"consecutive transient failures"
            )
        self._consecutive_failures = 0

    def record_failure(self, error: BaseException) -> None:
        """Record a final (post-retry) request failure."""
        if isinstance(error, RequestCancelledError):
            return
        if not isinstance(error, YouTrackError):
            return

        if error.is_semantic:
            self._consecutive_failures = 0
            return

        if not error.is_transient:
            return

        self._consecutive_failures += 1
        self._last_failure = error.message
        self._last_failure_time = datetime.now()

        for count, level in DEGRADATION_THRESHOLDS:
            if self._consecutive_failures == count:
                self._notify(level, error.message)
                break

    def _notify(self, level: DegradationLevel, last_message: str) -> None:
        state = "appears unreachable" if level == "error" else "appears unstable"
        message = (
            f"YouTrack {state} — {self._consecutive_failures} consecutive transient "
            f"failures. Base URL: {self.base_url}. Last: {last_message}"
        )
        logger.log(level.upper(), message)

        if self.on_degradation is None:
            return
        try:
            self.on_degradation(level, message)
        except Exception as e:
            logger.warning(f"Degradation callback failed: {e}")

    def reset(self) -> None:
        """Manually reset the failure counter."""
        self._consecutive_failures = 0
        self._last_failure = None
        self._last_failure_time = None

    def get_status(self) -> dict[str, Any]:
        """Get current status as dictionary."""
        return {
            "base_url": self.base_url,
            "consecutive_failures": self._consecutive_failures,
            "degraded": self.is_degraded,
            "last_failure": self._last_failure,
            "last_failure_time": (
                self._last_failure_time.isoformat() if self._last_failure_time else None
            ),
        }

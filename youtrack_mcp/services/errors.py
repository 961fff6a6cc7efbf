"""
Service layer exceptions and failure classification.

Taxonomy:
- Transient: 408, 425, 429, 5xx, network errors and timeouts.
  Retried automatically; the final error carries the retry count.
- Semantic: 400, 401, 403, 404 and other definite statuses.
  Never retried; the hint points at the corrective action.
- Cancelled: the caller abandoned the request. Never retried.
"""

import math
from datetime import datetime, timezone

from dateutil import parser as date_parser

# HTTP statuses that indicate a temporary condition worth retrying
TRANSIENT_STATUSES: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})

STATUS_HINTS: dict[int, str] = {
    400: "Check field names, query syntax, or parameter values. "
    "Tip: inspect the project schema to discover valid field names",
    401: "Authentication failed — verify YOUTRACK_TOKEN is valid and not expired. "
    "Regenerate at: Profile → Account Security → Tokens",
    403: "Insufficient permissions — this resource requires elevated access rights",
    404: "Resource not found — verify the ID or shortName exists in this YouTrack instance",
    408: "Request timed out",
    429: "Rate limit exceeded — reduce request frequency",
    500: "YouTrack internal server error — may be transient",
    502: "YouTrack gateway error — instance may be starting up",
    503: "YouTrack service unavailable — instance may be under maintenance or overloaded",
    504: "YouTrack gateway timeout — upstream response too slow",
}

NETWORK_HINT = "Network error — check connectivity to the YouTrack instance"


def is_transient_status(status: int) -> bool:
    """Return True if the HTTP status represents a retryable condition."""
    return status in TRANSIENT_STATUSES


def is_transient_failure(status: int | None) -> bool:
    """Classify a failure; no status means a network error or timeout."""
    if status is None:
        return True
    return is_transient_status(status)


def hint_for(status: int | None) -> str:
    """Short remediation text for a failure status."""
    if status is None:
        return NETWORK_HINT
    return STATUS_HINTS.get(status, f"HTTP {status}")


def parse_retry_after(header: str | None) -> int | None:
    """
    Parse a Retry-After header into milliseconds.

    Accepts delay-seconds ("120", "1.5") and HTTP-date values.
    Returns None if the header is absent or unparseable.
    """
    if not header:
        return None

    try:
        seconds = float(header)
    except ValueError:
        seconds = None

    if seconds is not None:
        if math.isfinite(seconds) and seconds >= 0:
            return math.ceil(seconds * 1000)
        return None

    try:
        when = date_parser.parse(header)
    except (ValueError, OverflowError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    delay = (when - datetime.now(timezone.utc)).total_seconds()
    return max(0, math.ceil(delay * 1000))


class ServiceError(Exception):
    """Base exception for service layer errors."""

    pass


class ConfigurationError(ServiceError):
    """Required configuration is missing or malformed. Fatal at startup."""

    pass


class YouTrackError(ServiceError):
    """
    Structured failure of a YouTrack API call.

    Carries the HTTP status so the retry engine can classify it, a hint so the
    agent can self-correct, and the number of retries already spent.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_transient: bool = False,
        retry_count: int = 0,
        retry_after_ms: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.is_transient = is_transient
        self.retry_count = retry_count
        self.retry_after_ms = retry_after_ms
        super().__init__(message)

    @classmethod
    def from_status(
        cls,
        message: str,
        status_code: int,
        retry_after_ms: int | None = None,
    ) -> "YouTrackError":
        return cls(
            message,
            status_code,
            is_transient_status(status_code),
            retry_after_ms=retry_after_ms,
        )

    @property
    def hint(self) -> str:
        return hint_for(self.status_code)

    @property
    def is_semantic(self) -> bool:
        """A definite status the server chose to reject the request with."""
        return self.status_code is not None and not self.is_transient

    def with_retry_count(self, retry_count: int) -> "YouTrackError":
        """Copy of this failure reporting how many retries were performed."""
        return YouTrackError(
            self.message,
            self.status_code,
            self.is_transient,
            retry_count=retry_count,
            retry_after_ms=self.retry_after_ms,
        )

    def to_tool_text(self) -> str:
        """
        Single-line error for tool output.

        Format: [YouTrack <status>] <message> — <hint> (retried N×)
        """
        code = f" {self.status_code}" if self.status_code is not None else ""
        text = f"[YouTrack{code}] {self.message} — {self.hint}"
        if self.retry_count > 0:
            text += f" (retried {self.retry_count}×, further retries will not help)"
        return text

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, status_code={self.status_code}, "
            f"is_transient={self.is_transient}, retry_count={self.retry_count})"
        )


class RequestCancelledError(YouTrackError):
    """The caller abandoned the request."""

    def __init__(self, message: str = "Request cancelled by client"):
        super().__init__(message, None, is_transient=False)

    @property
    def hint(self) -> str:
        return "Request was cancelled by the caller"

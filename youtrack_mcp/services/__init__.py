"""
Service layer infrastructure - resilience patterns for YouTrack API calls.

Provides:
- TTLCache: In-memory cache with expiry and bounded capacity
- RetryEngine: Classification-driven retries with fixed backoff
- HealthMonitor: Consecutive-failure tracking with threshold notifications
- YouTrackClient: Read-only client combining all patterns
"""

from youtrack_mcp.services.errors import (
    ServiceError,
    ConfigurationError,
    YouTrackError,
    RequestCancelledError,
    is_transient_status,
    parse_retry_after,
)
from youtrack_mcp.services.cache import TTLCache, CacheEntry, CacheResult
from youtrack_mcp.services.health import HealthMonitor
from youtrack_mcp.services.retry import RetryEngine, RetryPolicy
from youtrack_mcp.services.client import (
    YouTrackClient,
    BinaryContent,
    create_client,
    TTL_5MIN,
    TTL_HOUR,
    TTL_SESSION,
)

__all__ = [
    # Errors
    "ServiceError",
    "ConfigurationError",
    "YouTrackError",
    "RequestCancelledError",
    "is_transient_status",
    "parse_retry_after",
    # Cache
    "TTLCache",
    "CacheEntry",
    "CacheResult",
    # Health and retries
    "HealthMonitor",
    "RetryEngine",
    "RetryPolicy",
    # Client
    "YouTrackClient",
    "BinaryContent",
    "create_client",
    "TTL_5MIN",
    "TTL_HOUR",
    "TTL_SESSION",
]

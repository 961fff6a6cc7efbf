"""
Cache warmup and background refresh of reference data.
"""

from youtrack_mcp.warmup.catalog import (
    CURRENT_USER,
    FIVE_MIN_ENTRIES,
    HOUR_ENTRIES,
    REFRESH_TIERS,
    RefreshTier,
    WarmupEntry,
)
from youtrack_mcp.warmup.scheduler import (
    BatchResult,
    WarmupScheduler,
    fetch_batch,
    schedule_warmup,
)

__all__ = [
    "CURRENT_USER",
    "FIVE_MIN_ENTRIES",
    "HOUR_ENTRIES",
    "REFRESH_TIERS",
    "RefreshTier",
    "WarmupEntry",
    "BatchResult",
    "WarmupScheduler",
    "fetch_batch",
    "schedule_warmup",
]

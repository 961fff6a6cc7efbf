"""
Startup warmup and background cache refresh.

At startup the current user is fetched first and on its own: its failure
means the token or URL is wrong (logged as an error), while failures of the
remaining entries only mean partial reference data (logged as a warning).
The remaining entries are then refreshed concurrently.

Each refresh tier gets one APScheduler interval job. A tier never overlaps
itself: a tick arriving while the previous cycle is still running is skipped.
Background failures are logged and never propagate; the previously cached
value stays servable until a later cycle succeeds.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from youtrack_mcp.utils import LogFn, describe_error
from youtrack_mcp.warmup.catalog import (
    CURRENT_USER,
    REFRESH_TIERS,
    CurrentUser,
    RefreshTier,
    WarmupEntry,
)


class RefreshingClient(Protocol):
    async def force_refresh(
        self, path: str, params: Any = None, ttl: Any = None, signal: Any = None
    ) -> Any: ...


@dataclass
class BatchResult:
    """Outcome of refreshing a group of entries."""

    ok: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    def failure_summary(self) -> str:
        return "; ".join(f"{label}: {reason}" for label, reason in self.failed)


async def fetch_batch(
    client: RefreshingClient, entries: Sequence[WarmupEntry]
) -> BatchResult:
    """Refresh entries concurrently; one failure never blocks the others."""
    results = await asyncio.gather(
        *(client.force_refresh(e.path, e.params, e.ttl) for e in entries),
        return_exceptions=True,
    )

    batch = BatchResult()
    for entry, result in zip(entries, results):
        if isinstance(result, BaseException):
            batch.failed.append((entry.label, describe_error(result)))
        else:
            batch.ok.append(entry.label)
    return batch


class WarmupScheduler:
    """
    Pre-populates the client cache and keeps it fresh.

    Usage:
        warmup = WarmupScheduler(client, log)
        warmup.start()
        ...
        warmup.stop()
    """

    def __init__(
        self,
        client: RefreshingClient,
        log: LogFn,
        tiers: Sequence[RefreshTier] = REFRESH_TIERS,
        current_user: WarmupEntry = CURRENT_USER,
    ):
        self.client = client
        self.scheduler = AsyncIOScheduler()
        self.tiers = tuple(tiers)
        self.current_user = current_user
        self.startup_task: asyncio.Task[None] | None = None

        self._log = log
        self._in_flight: dict[str, bool] = {tier.name: False for tier in self.tiers}
        self._is_running = False

    async def run_startup_warmup(self) -> None:
        """Fetch the current user, then every tier's entries in parallel."""
        user_label = "unknown"
        try:
            data = await self.client.force_refresh(
                self.current_user.path,
                self.current_user.params,
                self.current_user.ttl,
            )
            if isinstance(data, dict):
                user_label = CurrentUser.model_validate(data).display_name
        except Exception as e:
            # Non-fatal: the error resurfaces when tools are called
            self._log(
                "error",
                f"Warmup: failed to authenticate — {describe_error(e)}. "
                "Check YOUTRACK_BASE_URL and YOUTRACK_TOKEN.",
            )

        entries = [entry for tier in self.tiers for entry in tier.entries]
        batch = await fetch_batch(self.client, entries)

        if not batch.failed:
            self._log(
                "info",
                f"Warmup complete — authenticated as {user_label}, "
                f"{len(batch.ok)} reference datasets cached ({', '.join(batch.ok)})",
            )
        else:
            self._log(
                "warning",
                f"Warmup partial — authenticated as {user_label}, "
                f"cached: {', '.join(batch.ok)}; "
                f"failed: {batch.failure_summary()}",
            )

    async def _startup_job(self) -> None:
        try:
            await self.run_startup_warmup()
        except Exception as e:
            self._log("error", f"Warmup threw unexpectedly: {describe_error(e)}")

    async def refresh_tier(self, tier: RefreshTier) -> bool:
        """
        Run one refresh cycle for a tier.

        Returns False if the tick was skipped because the previous cycle for
        the same tier is still running.
        """
        if self._in_flight.get(tier.name):
            logger.debug(f"Refresh tier '{tier.name}' still running, skipping tick")
            return False

        self._in_flight[tier.name] = True
        try:
            batch = await fetch_batch(self.client, tier.entries)
            if batch.failed:
                self._log(
                    "warning", f"Background refresh failed: {batch.failure_summary()}"
                )
            # successful cycles are silent
        except Exception as e:
            self._log("warning", f"Background refresh error: {describe_error(e)}")
        finally:
            self._in_flight[tier.name] = False
        return True

    def is_refreshing(self, tier_name: str) -> bool:
        return self._in_flight.get(tier_name, False)

    def start(self) -> None:
        """Launch the startup warmup and schedule one job per tier."""
        if self._is_running:
            logger.warning("WarmupScheduler is already running")
            return

        self.startup_task = asyncio.create_task(self._startup_job())

        for tier in self.tiers:
            self.scheduler.add_job(
                self.refresh_tier,
                trigger="interval",
                seconds=tier.interval.total_seconds(),
                args=[tier],
                id=f"refresh_{tier.name}",
                name=f"Reference refresh ({tier.name})",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )

        self.scheduler.start()
        self._is_running = True
        logger.info(
            "WarmupScheduler started: "
            + ", ".join(f"{t.name} every {t.interval}" for t in self.tiers)
        )

    def stop(self) -> None:
        """Cancel all background refresh jobs."""
        if not self._is_running:
            return

        self.scheduler.remove_all_jobs()
        self.scheduler.shutdown(wait=False)
        if self.startup_task is not None and not self.startup_task.done():
            self.startup_task.cancel()
        self._is_running = False
        logger.info("WarmupScheduler stopped")

    def is_running(self) -> bool:
        return self._is_running

    def get_status(self) -> dict[str, Any]:
        """Get scheduler status."""
        jobs = []
        if self._is_running:
            for job in self.scheduler.get_jobs():
                next_run = job.next_run_time
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                    }
                )
        return {
            "running": self._is_running,
            "jobs": jobs,
            "in_flight": dict(self._in_flight),
        }


def schedule_warmup(client: RefreshingClient, log: LogFn) -> Callable[[], None]:
    """
    Start non-blocking warmup and perpetual background refresh.

    Returns a cleanup callable that cancels all background jobs; call it on
    SIGTERM / SIGINT.
    """
    warmup = WarmupScheduler(client, log)
    warmup.start()
    return warmup.stop

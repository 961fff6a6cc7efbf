"""
Cooperative cancellation for outbound requests.

A signal is any object exposing ``is_set()``. An ``asyncio.Event`` also offers
an awaitable ``wait()``, which lets an in-flight request be aborted the moment
the caller gives up. Signals without an awaitable ``wait()`` (for example a
``threading.Event``) are still checked before every attempt, but the request
itself is then only bounded by the transport timeout.
"""

import asyncio
import inspect
from typing import Awaitable, Protocol, TypeVar

from youtrack_mcp.services.errors import RequestCancelledError

T = TypeVar("T")


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


def is_cancelled(signal: CancelSignal | None) -> bool:
    return signal is not None and signal.is_set()


def supports_async_wait(signal: CancelSignal | None) -> bool:
    """True if the signal can be awaited alongside a request."""
    if signal is None:
        return False
    return inspect.iscoroutinefunction(getattr(signal, "wait", None))


async def race_cancellation(
    awaitable: Awaitable[T],
    signal: CancelSignal | None,
    message: str = "Request cancelled by client",
) -> T:
    """
    Await ``awaitable`` unless ``signal`` fires first.

    When the signal wins, the pending request is cancelled and
    RequestCancelledError is raised.
    """
    if not supports_async_wait(signal):
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())  # type: ignore[attr-defined]
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    raise RequestCancelledError(message)


async def sleep_unless_cancelled(delay: float, signal: CancelSignal | None) -> None:
    """Sleep for ``delay`` seconds, waking early if the signal fires."""
    if not supports_async_wait(signal):
        await asyncio.sleep(delay)
        return

    try:
        await asyncio.wait_for(signal.wait(), timeout=delay)  # type: ignore[attr-defined]
    except asyncio.TimeoutError:
        pass

"""
youtrack-mcp entry point.

Builds the YouTrack client, wires health notifications to the log sink,
warms the reference-data cache and keeps it fresh until SIGINT / SIGTERM.
"""

import asyncio
import signal
import sys

from loguru import logger

from youtrack_mcp.services import ConfigurationError, YouTrackClient, create_client
from youtrack_mcp.settings import global_settings
from youtrack_mcp.utils import configure_logging, make_log_sink
from youtrack_mcp.warmup import schedule_warmup

VERSION = "0.1.0"


async def run(client: YouTrackClient) -> None:
    log = make_log_sink()

    # Health events go to the log channel, not into tool results
    health_log = make_log_sink(prefix="[health] ")
    client.on_degradation = health_log

    log("info", f"youtrack-mcp v{VERSION} started — {client.base_url}")

    stop_warmup = None
    if global_settings.warmup_enabled:
        stop_warmup = schedule_warmup(client, log)

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still raises
            pass

    try:
        await shutdown.wait()
        logger.info("Received shutdown signal, stopping...")
    finally:
        if stop_warmup is not None:
            stop_warmup()
        await client.close()
        logger.info("youtrack-mcp stopped")


def main() -> None:
    configure_logging(global_settings.log_level)

    try:
        client = create_client(global_settings)
    except ConfigurationError as e:
        logger.error(f"[youtrack-mcp] {e}")
        sys.exit(1)

    try:
        asyncio.run(run(client))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()

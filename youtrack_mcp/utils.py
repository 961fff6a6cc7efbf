import sys
from typing import Callable, Literal

from loguru import logger

from youtrack_mcp.services.errors import YouTrackError

LogLevel = Literal["info", "warning", "error"]
LogFn = Callable[[LogLevel, str], None]

_LOGURU_LEVELS: dict[str, str] = {
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
}


def configure_logging(level: str = "INFO") -> None:
    """
    Route loguru output to stderr.

    stdout is reserved for the MCP stdio transport.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} - {message}",
    )


def make_log_sink(prefix: str = "") -> LogFn:
    """
    Build the (level, message) sink shared by warmup and health monitoring.

    Delivery is best-effort: a failing sink never raises into the caller.
    """

    def log(level: LogLevel, message: str) -> None:
        try:
            logger.opt(depth=1).log(
                _LOGURU_LEVELS.get(level, "INFO"), f"{prefix}{message}"
            )
        except Exception as e:
            print(f"[youtrack-mcp] log delivery failed: {e}", file=sys.stderr)

    return log


def describe_error(error: BaseException) -> str:
    """Human-readable text for an arbitrary exception."""
    return str(error) or type(error).__name__


def format_tool_error(error: BaseException) -> str:
    """
    Render a failure for tool output.

    YouTrackErrors include their hint so the agent can self-correct
    without an extra round-trip.
    """
    if isinstance(error, YouTrackError):
        return error.to_tool_text()
    return describe_error(error)

import pytest
from loguru import logger

from youtrack_mcp.services.errors import YouTrackError
from youtrack_mcp.utils import describe_error, format_tool_error, make_log_sink


@pytest.fixture
def records():
    captured: list[dict] = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(handler_id)


def test_log_sink_routes_levels_to_loguru(records) -> None:
    log = make_log_sink(prefix="[health] ")

    log("info", "fine")
    log("warning", "flaky")
    log("error", "down")

    assert [r["level"].name for r in records] == ["INFO", "WARNING", "ERROR"]
    assert records[2]["message"] == "[health] down"


def test_describe_error_falls_back_to_type_name() -> None:
    assert describe_error(ValueError("bad")) == "bad"
    assert describe_error(TimeoutError()) == "TimeoutError"


def test_format_tool_error() -> None:
    assert format_tool_error(RuntimeError("boom")) == "boom"

    text = format_tool_error(YouTrackError("Issue not found", 404))
    assert text.startswith("[YouTrack 404] Issue not found — ")
    assert "Resource not found" in text

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from youtrack_mcp.services.errors import (
    RequestCancelledError,
    YouTrackError,
    hint_for,
    is_transient_failure,
    is_transient_status,
    parse_retry_after,
)


@pytest.mark.parametrize("status", [408, 425, 429, 500, 502, 503, 504])
def test_transient_statuses(status: int) -> None:
    assert is_transient_status(status)
    assert YouTrackError.from_status("x", status).is_transient


@pytest.mark.parametrize("status", [400, 401, 403, 404, 200, 201])
def test_semantic_statuses(status: int) -> None:
    assert not is_transient_status(status)


def test_missing_status_is_transient() -> None:
    assert is_transient_failure(None)
    assert not is_transient_failure(404)


def test_error_properties() -> None:
    err = YouTrackError("Not found", 404, False, 0)
    assert err.message == "Not found"
    assert str(err) == "Not found"
    assert err.status_code == 404
    assert not err.is_transient
    assert err.is_semantic
    assert err.retry_count == 0
    assert err.retry_after_ms is None


def test_hints() -> None:
    assert "Authentication failed" in YouTrackError("err", 401).hint
    assert "Resource not found" in hint_for(404)
    assert "reduce request frequency" in hint_for(429)
    assert YouTrackError("err", 418).hint == "HTTP 418"
    assert "Network error" in YouTrackError("err", None, True).hint


def test_to_tool_text_includes_retry_info() -> None:
    text = YouTrackError("timeout", 429, True, 2).to_tool_text()
    assert text.startswith("[YouTrack 429] timeout — ")
    assert "retried 2×" in text


def test_to_tool_text_omits_retry_info_without_retries() -> None:
    assert "retried" not in YouTrackError("fail", 500, True, 0).to_tool_text()


def test_to_tool_text_without_status() -> None:
    assert YouTrackError("boom", None, True).to_tool_text().startswith("[YouTrack] boom")


def test_with_retry_count_preserves_fields() -> None:
    original = YouTrackError("rate limited", 429, True, 0, 5000)
    rebuilt = original.with_retry_count(2)
    assert rebuilt.retry_count == 2
    assert rebuilt.message == "rate limited"
    assert rebuilt.status_code == 429
    assert rebuilt.is_transient
    assert rebuilt.retry_after_ms == 5000
    assert original.retry_count == 0


def test_cancelled_error_is_neither_transient_nor_semantic() -> None:
    err = RequestCancelledError()
    assert isinstance(err, YouTrackError)
    assert not err.is_transient
    assert not err.is_semantic
    assert err.status_code is None
    assert "cancelled" in err.message


def test_parse_retry_after_absent() -> None:
    assert parse_retry_after(None) is None
    assert parse_retry_after("") is None


def test_parse_retry_after_seconds() -> None:
    assert parse_retry_after("120") == 120_000
    assert parse_retry_after("1.5") == 1500
    assert parse_retry_after("0") == 0


def test_parse_retry_after_garbage() -> None:
    assert parse_retry_after("abc") is None


def test_parse_retry_after_http_date() -> None:
    future = format_datetime(datetime.now(timezone.utc) + timedelta(seconds=60), usegmt=True)
    result = parse_retry_after(future)
    assert result is not None
    assert 50_000 <= result <= 61_000

    past = format_datetime(datetime.now(timezone.utc) - timedelta(hours=1), usegmt=True)
    assert parse_retry_after(past) == 0

import pytest
from pydantic import ValidationError

from youtrack_mcp.services.errors import ConfigurationError
from youtrack_mcp.settings import is_valid_base_url, load_settings


def test_defaults() -> None:
    settings = load_settings({})
    assert settings.youtrack_base_url == ""
    assert settings.request_timeout == 30.0
    assert settings.cache_max_entries == 1000
    assert settings.warmup_enabled is True
    assert settings.log_level == "INFO"


def test_reads_environment_names() -> None:
    settings = load_settings(
        {
            "YOUTRACK_BASE_URL": "https://yt.example.com",
            "YOUTRACK_TOKEN": "perm:abc",
            "YOUTRACK_REQUEST_TIMEOUT": "10",
            "YOUTRACK_CACHE_MAX_ENTRIES": "200",
            "YOUTRACK_WARMUP": "false",
            "LOG_LEVEL": "DEBUG",
            "UNRELATED": "ignored",
        }
    )
    assert settings.youtrack_token == "perm:abc"
    assert settings.request_timeout == 10.0
    assert settings.cache_max_entries == 200
    assert settings.warmup_enabled is False
    assert settings.log_level == "DEBUG"
    settings.validate_connection()


@pytest.mark.parametrize(
    "environ",
    [{"YOUTRACK_REQUEST_TIMEOUT": "0"}, {"YOUTRACK_CACHE_MAX_ENTRIES": "0"}],
)
def test_rejects_out_of_range_values(environ: dict[str, str]) -> None:
    with pytest.raises(ValidationError):
        load_settings(environ)


def test_validate_connection_messages() -> None:
    with pytest.raises(ConfigurationError, match="YOUTRACK_BASE_URL is required"):
        load_settings({"YOUTRACK_TOKEN": "t"}).validate_connection()

    with pytest.raises(ConfigurationError, match="Account Security"):
        load_settings({"YOUTRACK_BASE_URL": "https://yt.example.com"}).validate_connection()

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(
            {"YOUTRACK_BASE_URL": "yt.example.com", "YOUTRACK_TOKEN": "t"}
        ).validate_connection()
    assert str(exc_info.value) == 'YOUTRACK_BASE_URL is not a valid URL: "yt.example.com"'


@pytest.mark.parametrize(
    "value, expected",
    [
        ("https://yt.example.com", True),
        ("http://localhost:8080/youtrack", True),
        ("yt.example.com", False),
        ("ftp://yt.example.com", False),
    ],
)
def test_is_valid_base_url(value: str, expected: bool) -> None:
    assert is_valid_base_url(value) is expected

import os
from typing import Mapping

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from youtrack_mcp.services.errors import ConfigurationError

load_dotenv()


class Settings(BaseModel):
    # YouTrack connection
    youtrack_base_url: str = Field(default="", alias="YOUTRACK_BASE_URL")
    youtrack_token: str = Field(default="", alias="YOUTRACK_TOKEN")

    # HTTP client runtime
    request_timeout: float = Field(default=30.0, alias="YOUTRACK_REQUEST_TIMEOUT", gt=0)
    cache_max_entries: int = Field(default=1000, alias="YOUTRACK_CACHE_MAX_ENTRIES", ge=1)

    # Startup warmup and background refresh
    warmup_enabled: bool = Field(default=True, alias="YOUTRACK_WARMUP")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    def validate_connection(self) -> None:
        """Fail fast when the client cannot possibly work."""
        if not self.youtrack_base_url:
            raise ConfigurationError(
                "YOUTRACK_BASE_URL is required.\n"
                "  Example: https://yourcompany.youtrack.cloud"
            )
        if not self.youtrack_token:
            raise ConfigurationError(
                "YOUTRACK_TOKEN is required.\n"
                "  Create one at: Profile → Account Security → Tokens"
            )
        if not is_valid_base_url(self.youtrack_base_url):
            raise ConfigurationError(
                f'YOUTRACK_BASE_URL is not a valid URL: "{self.youtrack_base_url}"'
            )


def is_valid_base_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment (or an explicit mapping)."""
    source = os.environ if environ is None else environ
    return Settings.model_validate(dict(source))


global_settings = load_settings()

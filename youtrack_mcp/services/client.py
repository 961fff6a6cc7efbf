"""
YouTrackClient - Read-only async HTTP client for the YouTrack REST API.

Combines:
- TTLCache for reference data that changes rarely
- RetryEngine for transient failures (network, timeout, 408/425/429/5xx)
- HealthMonitor for consecutive-failure degradation notifications
"""

import base64
import re
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Mapping

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from youtrack_mcp.services.cache import MAX_CACHE_ENTRIES, TTLCache
from youtrack_mcp.services.cancellation import (
    CancelSignal,
    is_cancelled,
    race_cancellation,
)
from youtrack_mcp.services.errors import (
    RequestCancelledError,
    YouTrackError,
    parse_retry_after,
)
from youtrack_mcp.services.health import DegradationCallback, HealthMonitor
from youtrack_mcp.services.retry import RetryEngine, RetryPolicy

if TYPE_CHECKING:
    from youtrack_mcp.settings import Settings

Params = Mapping[str, str | int | float | bool]

TIMEOUT_SECONDS = 30.0
DEFAULT_MIME_TYPE = "application/octet-stream"

# Reference data that almost never changes (link types, custom field bundles)
TTL_HOUR = timedelta(hours=1)

# Organisational data that changes rarely (project list, schemas)
TTL_5MIN = timedelta(minutes=5)

# User identity for the lifetime of the process
TTL_SESSION = timedelta(days=365 * 100)

# Page size for reference collections fetched in one request
REFERENCE_PAGE_SIZE = 500

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)
_ERROR_BODY_FIELDS = ("error_description", "error", "message")


class BinaryContent(BaseModel):
    """Downloaded binary resource, base64-encoded."""

    model_config = ConfigDict(populate_by_name=True)

    data: str
    mime_type: str = Field(alias="mimeType")


class YouTrackClient:
    """
    Read-only YouTrack REST client with caching, retries and health tracking.

    Usage:
        async with YouTrackClient("https://yt.example.com", token) as client:
            # Live data, always from the network
            issue = await client.fetch_json("/issues/FOO-1", {"fields": "id,summary"})

            # Reference data, cached for five minutes
            projects = await client.fetch_json(
                "/admin/projects", {"fields": "id,name"}, ttl=TTL_5MIN
            )
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = TIMEOUT_SECONDS,
        cache_max_size: int = MAX_CACHE_ENTRIES,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        cache: TTLCache | None = None,
        debug: bool = False,
    ):
        # Base URL without /api suffix, used for attachment URLs
        self.base_url = base_url.rstrip("/")
        self.api_base = f"{self.base_url}/api"
        self._auth_header = f"Bearer {token}"
        self._timeout = timeout

        self._cache = (
            cache if cache is not None else TTLCache(max_size=cache_max_size, debug=debug)
        )
        self._health = HealthMonitor(self.base_url)
        self._retry = RetryEngine(self._health, retry_policy)

        # HTTP client (lazy initialization)
        self._http_client = http_client

    @property
    def on_degradation(self) -> DegradationCallback | None:
        """Fired at 3 (warning) and 5 (error) consecutive transient failures."""
        return self._health.on_degradation

    @on_degradation.setter
    def on_degradation(self, callback: DegradationCallback | None) -> None:
        self._health.on_degradation = callback

    @property
    def cache(self) -> TTLCache:
        return self._cache

    @property
    def health(self) -> HealthMonitor:
        return self._health

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._http_client

    def build_url(self, path: str, params: Params | None = None) -> str:
        """Canonical request URL, query parameters sorted by name."""
        query = [(key, _param_value(value)) for key, value in sorted((params or {}).items())]
        return str(httpx.URL(f"{self.api_base}{path}", params=query))

    async def fetch_json(
        self,
        path: str,
        params: Params | None = None,
        ttl: timedelta | None = None,
        signal: CancelSignal | None = None,
    ) -> Any:
        """
        GET a YouTrack API path and return the decoded JSON.

        Args:
            path: API path, e.g. ``/issues/FOO-1``
            params: Query parameters (fields, $top, $skip, ...)
            ttl: Cache lifetime. Omit for live data, which is never cached.
            signal: Optional cancellation signal from the caller

        Raises:
            YouTrackError: On any failure after retries
        """
        url = self.build_url(path, params)

        if ttl is not None:
            cached = self._cache.get(url)
            if cached is not None:
                return cached.data

        data = await self._retry.run(lambda: self._get_json(url, signal), signal)

        if ttl is not None:
            self._cache.set(url, data, ttl)
        return data

    async def force_refresh(
        self,
        path: str,
        params: Params | None = None,
        ttl: timedelta | None = None,
        signal: CancelSignal | None = None,
    ) -> Any:
        """
        Fetch bypassing the cache, then re-populate it.

        The cache key matches what ``fetch_json`` builds for the same arguments,
        so later ``fetch_json`` calls hit the fresh entry. On failure any
        previous entry is left untouched.
        """
        url = self.build_url(path, params)
        data = await self._retry.run(lambda: self._get_json(url, signal), signal)
        if ttl is not None:
            self._cache.set(url, data, ttl)
        return data

    async def fetch_bytes(
        self,
        url: str,
        signal: CancelSignal | None = None,
    ) -> BinaryContent:
        """
        Download a binary resource (attachment, thumbnail) with the YouTrack token.

        Accepts absolute or root-relative URLs. Never cached.
        """
        absolute_url = self.resolve_url(url)

        async def download() -> BinaryContent:
            response = await self._send(
                absolute_url,
                {"Authorization": self._auth_header},
                signal,
                timeout_message=f"Attachment download timed out: {absolute_url}",
                cancel_message="Attachment download cancelled",
            )
            if not response.is_success:
                raise YouTrackError.from_status(
                    f"Attachment download failed: {absolute_url}",
                    response.status_code,
                    parse_retry_after(response.headers.get("retry-after")),
                )

            content_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
            mime_type = content_type.split(";")[0].strip() or DEFAULT_MIME_TYPE
            return BinaryContent(
                data=base64.b64encode(response.content).decode("ascii"),
                mime_type=mime_type,
            )

        return await self._retry.run(download, signal)

    def resolve_url(self, url: str) -> str:
        """Resolve a relative attachment URL against the base origin."""
        if _ABSOLUTE_URL.match(url):
            return url
        if not url.startswith("/"):
            url = f"/{url}"
        return f"{self.base_url}{url}"

    async def _get_json(self, url: str, signal: CancelSignal | None) -> Any:
        """Single JSON GET attempt."""
        response = await self._send(
            url,
            {"Authorization": self._auth_header, "Accept": "application/json"},
            signal,
            timeout_message=f"Request timed out after {self._timeout:g}s",
            cancel_message="Request cancelled by client",
        )

        if not response.is_success:
            raise YouTrackError.from_status(
                _parse_error_body(response),
                response.status_code,
                parse_retry_after(response.headers.get("retry-after")),
            )

        try:
            return response.json()
        except ValueError as e:
            raise YouTrackError(
                f"Invalid JSON in response from {url}",
                response.status_code,
                is_transient=False,
            ) from e

    async def _send(
        self,
        url: str,
        headers: dict[str, str],
        signal: CancelSignal | None,
        timeout_message: str,
        cancel_message: str,
    ) -> httpx.Response:
        """Execute the actual HTTP request, translating transport errors."""
        client = await self._get_http_client()

        try:
            return await race_cancellation(
                client.get(url, headers=headers, timeout=self._timeout),
                signal,
                cancel_message,
            )

        except httpx.TimeoutException as e:
            raise YouTrackError(timeout_message, None, is_transient=True) from e

        except httpx.RequestError as e:
            if is_cancelled(signal):
                raise RequestCancelledError(cancel_message) from e
            raise YouTrackError(
                str(e) or "Network error", None, is_transient=True
            ) from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("YouTrackClient closed")

    async def __aenter__(self) -> "YouTrackClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def get_health_status(self) -> dict[str, Any]:
        """Get cache and availability status."""
        return {
            "cache": self._cache.get_stats().to_dict(),
            "health": self._health.get_status(),
        }

    def clear_cache(self) -> None:
        self._cache.clear()


def _param_value(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_error_body(response: httpx.Response) -> str:
    """Pick the most specific error text from a YouTrack error response."""
    fallback = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback

    if isinstance(body, dict):
        for field in _ERROR_BODY_FIELDS:
            value = body.get(field)
            if value is not None:
                return str(value)
    return fallback


def create_client(settings: "Settings | None" = None) -> YouTrackClient:
    """
    Build a client from settings, validating them first.

    Raises:
        ConfigurationError: If the base URL or token is missing or malformed
    """
    from youtrack_mcp.settings import load_settings

    settings = settings or load_settings()
    settings.validate_connection()

    return YouTrackClient(
        base_url=settings.youtrack_base_url,
        token=settings.youtrack_token,
        timeout=settings.request_timeout,
        cache_max_size=settings.cache_max_entries,
    )

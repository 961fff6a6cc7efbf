"""
Warmup catalog - reference datasets kept warm in the client cache.

Tiers:
- Session: /users/me. Fetched once at startup; confirms the token and shows
  which account is in use.
- 5 minutes: /admin/projects (list and detail projections). Projects scope
  almost every call, so new projects should appear quickly.
- 1 hour: link types, global custom fields, tags. Stable catalogs; the hourly
  refresh propagates schema changes.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from youtrack_mcp import fields as F
from youtrack_mcp.services.client import (
    REFERENCE_PAGE_SIZE,
    TTL_5MIN,
    TTL_HOUR,
    TTL_SESSION,
)


@dataclass(frozen=True)
class WarmupEntry:
    """One reference dataset to pre-fetch."""

    label: str
    path: str
    params: Mapping[str, str | int] = field(default_factory=dict)
    ttl: timedelta = TTL_HOUR


@dataclass(frozen=True)
class RefreshTier:
    """Entries refreshed together on one interval."""

    name: str
    interval: timedelta
    entries: tuple[WarmupEntry, ...]


class CurrentUser(BaseModel):
    """Subset of /users/me used to name the authenticated account."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    login: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")

    @property
    def display_name(self) -> str:
        return self.full_name or self.login or "unknown"


CURRENT_USER = WarmupEntry(
    label="current-user",
    path="/users/me",
    params={"fields": F.USER},
    ttl=TTL_SESSION,
)

FIVE_MIN_ENTRIES: tuple[WarmupEntry, ...] = (
    # List projection, as used by project listing
    WarmupEntry(
        label="projects",
        path="/admin/projects",
        params={"fields": F.PROJECT_LIST, "$top": REFERENCE_PAGE_SIZE},
        ttl=TTL_5MIN,
    ),
    # Detail projection, as used by the projects resource
    WarmupEntry(
        label="projects-detail",
        path="/admin/projects",
        params={"fields": F.PROJECT_DETAIL, "$top": REFERENCE_PAGE_SIZE},
        ttl=TTL_5MIN,
    ),
)

HOUR_ENTRIES: tuple[WarmupEntry, ...] = (
    WarmupEntry(
        label="link-types",
        path="/issueLinkTypes",
        params={"fields": F.LINK_TYPE},
        ttl=TTL_HOUR,
    ),
    WarmupEntry(
        label="global-custom-fields",
        path="/admin/customFieldSettings/customFields",
        params={"fields": F.GLOBAL_CUSTOM_FIELD, "$top": REFERENCE_PAGE_SIZE},
        ttl=TTL_HOUR,
    ),
    WarmupEntry(
        label="tags",
        path="/tags",
        params={"fields": F.TAG, "$top": REFERENCE_PAGE_SIZE},
        ttl=TTL_HOUR,
    ),
)

REFRESH_TIERS: tuple[RefreshTier, ...] = (
    RefreshTier(name="5min", interval=TTL_5MIN, entries=FIVE_MIN_ENTRIES),
    RefreshTier(name="hourly", interval=TTL_HOUR, entries=HOUR_ENTRIES),
)

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field


class FetchStatus(StrEnum):
    FRESH = "fresh"
    NOT_MODIFIED = "not_modified"


class FetchResult(BaseModel):
    """Outcome of a conditional fetch of one remote TLD list."""

    url: str
    status: FetchStatus
    content: bytes = b""


class CheckResult(BaseModel):
    """Everything a single blacklist check decided, for diagnostics and tests."""

    hostname: str
    labels: list[str] = Field(default_factory=list)
    ip_literal: bool = False
    level: int = 2
    table_lookups: int = 0
    domain: str | None = None
    query_name: str | None = None
    listed: bool = False
    addresses: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    error: str | None = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RefreshStats(BaseModel):
    """Result of one TldTableProvider.refresh() call."""

    reloaded: bool = False
    levels_reloaded: list[int] = Field(default_factory=list)
    levels_fetched: list[int] = Field(default_factory=list)
    levels_from_stale_cache: list[int] = Field(default_factory=list)


class RunStats(BaseModel):
    """Statistics for a single CLI run."""

    hosts_checked: int = 0
    listed_count: int = 0
    clean_count: int = 0
    errors: int = 0
    tables_reloaded: bool = False

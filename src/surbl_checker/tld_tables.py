"""In-memory two-level and three-level TLD tables, refreshed from a remote source.

The tables live in an immutable TldSnapshot. A refresh builds new frozensets and
publishes them by replacing the provider's snapshot reference, so checks running
on other threads only ever see complete tables. Refreshes themselves are
serialized by a lock.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

import structlog

from .cache_store import CacheStore
from .errors import NotLoadedError, TldLoadError, TransientNetworkError
from .models import FetchStatus, RefreshStats
from .tld_source import TldSource

log = structlog.get_logger()

LEVELS = (2, 3)


@dataclass(frozen=True)
class TldSnapshot:
    level_two: frozenset[str] | None = None
    level_three: frozenset[str] | None = None

    def get(self, level: int) -> frozenset[str] | None:
        if level == 2:
            return self.level_two
        if level == 3:
            return self.level_three
        raise ValueError(f"No TLD table for level {level}")

    def with_level(self, level: int, suffixes: frozenset[str]) -> TldSnapshot:
        if level == 2:
            return replace(self, level_two=suffixes)
        if level == 3:
            return replace(self, level_three=suffixes)
        raise ValueError(f"No TLD table for level {level}")

    def table_for(self, level: int) -> frozenset[str]:
        suffixes = self.get(level)
        if suffixes is None:
            raise NotLoadedError(f"TLD table for level {level} is not loaded")
        return suffixes


class TldTableProvider:
    def __init__(
        self,
        cache: CacheStore,
        source: TldSource,
        refresh_interval_hours: int = 24,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = cache
        self._source = source
        self._max_age = refresh_interval_hours * 3600
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot = TldSnapshot()

    @property
    def snapshot(self) -> TldSnapshot:
        return self._snapshot

    def table_for(self, level: int) -> frozenset[str]:
        return self._snapshot.table_for(level)

    def refresh(self) -> bool:
        """Bring both tables up to date. Returns True if any table was (re)loaded."""
        return self.refresh_stats().reloaded

    def refresh_stats(self) -> RefreshStats:
        with self._lock:
            stats = RefreshStats()
            now = self._clock()
            for level in LEVELS:
                loaded = self._snapshot.get(level) is not None
                age = self._cache.age_seconds(level, now)

                if age is None or age > self._max_age:
                    suffixes = self._refresh_stale(level, loaded, stats)
                elif not loaded:
                    suffixes = self._load_cache(level)
                else:
                    suffixes = None

                if suffixes is not None:
                    self._snapshot = self._snapshot.with_level(level, suffixes)
                    stats.levels_reloaded.append(level)

            stats.reloaded = bool(stats.levels_reloaded)
            log.info("tld_refresh_complete", **stats.model_dump())
            return stats

    def _refresh_stale(
        self, level: int, loaded: bool, stats: RefreshStats
    ) -> frozenset[str] | None:
        mtime = self._cache.last_modified(level)
        try:
            result = self._source.fetch(level, if_modified_since=mtime)
        except TransientNetworkError as exc:
            log.warning("tld_fetch_failed", level=level, error=str(exc))
            return self._fall_back(level, loaded, stats, exc)

        if result.status == FetchStatus.FRESH:
            try:
                self._cache.write(level, result.content)
            except OSError as exc:
                log.warning("tld_cache_write_failed", level=level, error=str(exc))
                return self._fall_back(level, loaded, stats, exc)
            stats.levels_fetched.append(level)
            return self._load_cache(level)

        if mtime is None:
            log.warning("tld_not_modified_without_cache", level=level)
            return self._fall_back(level, loaded, stats, None)
        self._cache.touch(level)
        return None if loaded else self._load_cache(level)

    def _fall_back(
        self, level: int, loaded: bool, stats: RefreshStats, exc: Exception | None
    ) -> frozenset[str] | None:
        """Use the stale cache, else keep the table in memory; raise only if neither exists."""
        if self._cache.exists(level):
            try:
                suffixes = self._load_cache(level)
            except TldLoadError:
                if not loaded:
                    raise
            else:
                log.warning("tld_fetch_failed_using_cache", level=level)
                stats.levels_from_stale_cache.append(level)
                return suffixes
        if loaded:
            log.warning("tld_fetch_failed_keeping_loaded", level=level)
            return None
        raise TldLoadError(
            f"TLD table for level {level} unavailable: no usable cache and fetch failed"
        ) from exc

    def _load_cache(self, level: int) -> frozenset[str]:
        try:
            return self._cache.read_suffixes(level)
        except (OSError, UnicodeDecodeError) as exc:
            raise TldLoadError(f"Cannot read TLD cache for level {level}") from exc

"""SURBL client: Spam URI Realtime Blocklist lookups with cached TLD tables.

Typical use::

    surbl = SURBL()
    surbl.load()
    if surbl.check("www.acme.com"):
        ...

``load()`` should be called again periodically; it only downloads the TLD
lists when the cached copies are older than the refresh interval.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

import structlog

from .cache_store import CacheStore
from .checker import Resolver, SurblChecker
from .config import settings
from .errors import SurblError
from .models import CheckResult, RefreshStats
from .resolver import DnsResolver
from .tld_source import HttpTldSource, TldSource
from .tld_tables import TldTableProvider

log = structlog.get_logger()


class SURBL:
    def __init__(
        self,
        cache_dir: str | os.PathLike[str] | None = None,
        *,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        dns_timeout: float | None = None,
        dns_lifetime: float | None = None,
        zone: str | None = None,
        strict: bool | None = None,
        source: TldSource | None = None,
        resolver: Resolver | None = None,
    ) -> None:
        self.cache = CacheStore(cache_dir if cache_dir is not None else settings.cache_dir)
        if source is None:
            source = HttpTldSource(
                urls={2: settings.two_level_url, 3: settings.three_level_url},
                connect_timeout=connect_timeout if connect_timeout is not None else settings.connect_timeout,
                read_timeout=read_timeout if read_timeout is not None else settings.read_timeout,
            )
        if resolver is None:
            nameservers = [ns.strip() for ns in settings.nameservers.split(",") if ns.strip()]
            resolver = DnsResolver(
                timeout=dns_timeout if dns_timeout is not None else settings.dns_timeout,
                lifetime=dns_lifetime if dns_lifetime is not None else settings.dns_lifetime,
                nameservers=nameservers,
            )
        self.resolver = resolver
        self.tables = TldTableProvider(
            self.cache, source, refresh_interval_hours=settings.refresh_interval_hours
        )
        self.checker = SurblChecker(
            self.tables,
            resolver,
            zone=zone or settings.blacklist_zone,
            strict=settings.strict if strict is None else strict,
        )
        log.debug("surbl_client_created", cache_dir=str(self.cache.directory), zone=self.checker.zone)

    def load(self) -> bool:
        """Load the TLD tables, downloading them if stale. True if any table was reloaded."""
        return self.tables.refresh()

    refresh = load

    def load_stats(self) -> RefreshStats:
        return self.tables.refresh_stats()

    def check(self, hostname: str) -> bool:
        """True if `hostname` is listed in SURBL."""
        return self.checker.check(hostname)

    def lookup(self, hostname: str) -> CheckResult:
        return self.checker.lookup(hostname)

    def check_many(
        self,
        hostnames: Iterable[str],
        workers: int | None = None,
        return_exceptions: bool = False,
    ) -> list[CheckResult | SurblError]:
        """Look up several hostnames concurrently; results keep the input order.

        A SurblError raised for a hostname (e.g. MalformedInputError) propagates,
        unless `return_exceptions` is set, in which case it takes that host's slot.
        """
        def _lookup(hostname: str) -> CheckResult | SurblError:
            try:
                return self.checker.lookup(hostname)
            except SurblError as exc:
                if not return_exceptions:
                    raise
                return exc

        hosts = list(hostnames)
        with ThreadPoolExecutor(max_workers=max(1, workers or settings.workers)) as pool:
            return list(pool.map(_lookup, hosts))

"""Work out the registrable domain of a hostname and look it up in the SURBL zone.

A hostname is cut down to its last two labels. If those two labels are a known
two-level public suffix (``co.uk``) the cut moves to three labels, and if those
are a known three-level suffix (``blogspot.co.uk``) to four. IPv4 literals are
queried with all four octets in reverse order. Only the resulting domain is
queried; parent domains are never tried.

References:
    http://www.surbl.org/guidelines
    RFC 5782 - DNS Blacklists and Whitelists
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Protocol

import structlog

from .errors import BlacklistQueryError, InvalidInputError, MalformedInputError, ResolverError
from .models import CheckResult
from .tld_tables import TldSnapshot

log = structlog.get_logger()

LISTED_PREFIX = "127."

# Return code bits of the multi.surbl.org combined list
CATEGORY_BITS = {
    8: "phishing",
    16: "malware",
    64: "abuse",
    128: "cracked",
}


class Resolver(Protocol):
    def resolve(self, name: str) -> list[str]: ...


class TableSource(Protocol):
    @property
    def snapshot(self) -> TldSnapshot: ...


@dataclass(frozen=True)
class DomainCheck:
    """The domain chosen for a hostname. `domain` is None for a bare public suffix."""

    labels: tuple[str, ...]
    level: int
    domain: str | None
    ip_literal: bool
    table_lookups: int

    """Canonical form used for both IP literal detection and label splitting."""
def normalize(hostname: str) -> str:
    """Lowercase, drop surrounding whitespace, the trailing root dot and IP literal brackets."""
    return hostname.strip().lower().rstrip(".").strip("[]")


def split_labels(hostname: str) -> list[str]:
    return [label for label in hostname.split(".") if label]


def ip_version(hostname: str) -> int | None:
    """4 or 6 if hostname is an IP literal, else None."""
    try:
        return ipaddress.ip_address(hostname.strip("[]")).version
    except ValueError:
        return None


def host_level(labels: list[str] | tuple[str, ...], level: int) -> str:
    offset = len(labels) - level
    return ".".join(labels[offset : offset + level])


def decode_categories(addresses: list[str]) -> list[str]:
    codes = 0
    for ip in addresses:
        parts = ip.split(".")
        if len(parts) == 4 and parts[3].isdigit():
            codes |= int(parts[3])
    return [name for bit, name in CATEGORY_BITS.items() if codes & bit]


class SurblChecker:
    def __init__(
        self,
        tables: TableSource,
        resolver: Resolver,
        zone: str = "multi.surbl.org",
        strict: bool = False,
    ) -> None:
        self._tables = tables
        self._resolver = resolver
        self.zone = zone.strip(".")
        self.strict = strict

    def domain_for(self, hostname: str) -> DomainCheck:
        """Pick the domain to query for `hostname`.

        Raises MalformedInputError for IPv6 literals and InvalidInputError when
        fewer than two labels remain. Raises NotLoadedError if a TLD table that is
        needed has not been loaded yet.
        """
        host = normalize(hostname)
        labels = split_labels(host)
        level = 2

        version = ip_version(host)
        if version == 6:
            raise MalformedInputError(f"Unsupported IPv6: {hostname}")
        if version == 4:
            labels.reverse()
            level = 4
        else:
            log.debug("hostname_not_ip_literal", hostname=host)

        log.debug("domain_tokens", labels=labels)
        if len(labels) < 2:
            raise InvalidInputError(f"Not a qualified hostname: {hostname!r}")

        snapshot = self._tables.snapshot
        lookups = 0
        domain: str | None = None
        while level <= len(labels):
            domain = host_level(labels, level)
            if level in (2, 3):
                lookups += 1
                if domain in snapshot.table_for(level):
                    level += 1
                    domain = None
                    continue
            break

        return DomainCheck(
            labels=tuple(labels),
            level=level,
            domain=domain,
            ip_literal=version == 4,
            table_lookups=lookups,
        )

    def lookup(self, hostname: str) -> CheckResult:
        """Check `hostname` and report how the answer was reached."""
        try:
            dc = self.domain_for(hostname)
        except InvalidInputError:
            log.info("surbl_local_host", hostname=hostname)
            return CheckResult(hostname=hostname, labels=split_labels(normalize(hostname)))

        fields = dict(
            hostname=hostname,
            labels=list(dc.labels),
            ip_literal=dc.ip_literal,
            level=dc.level,
            table_lookups=dc.table_lookups,
            domain=dc.domain,
        )
        if dc.domain is None:
            log.info("surbl_public_suffix", hostname=hostname, level=dc.level)
            return CheckResult(**fields)

        query_name = f"{dc.domain}.{self.zone}."
        log.info("surbl_checking", level=dc.level, domain=dc.domain)
        try:
            addresses = self._resolver.resolve(query_name)
        except ResolverError as exc:
            if self.strict:
                raise BlacklistQueryError(f"SURBL query failed for {dc.domain}") from exc
            log.warning("surbl_query_failed", domain=dc.domain, error=str(exc))
            return CheckResult(**fields, query_name=query_name, error=str(exc))

        listed = [ip for ip in addresses if ip.startswith(LISTED_PREFIX)]
        if listed:
            categories = decode_categories(listed)
            log.info("surbl_listed", domain=dc.domain, addresses=listed, categories=categories)
        else:
            categories = []
            log.info("surbl_clean", domain=dc.domain)

        return CheckResult(
            **fields,
            query_name=query_name,
            listed=bool(listed),
            addresses=addresses,
            categories=categories,
        )

    def check(self, hostname: str) -> bool:
        """True if `hostname` is blacklisted."""
        return self.lookup(hostname).listed

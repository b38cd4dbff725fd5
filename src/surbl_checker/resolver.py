from __future__ import annotations

import dns.exception
import dns.resolver
import structlog

from .errors import ResolverError

log = structlog.get_logger()


class DnsResolver:
    """Forward A lookups. A name that does not exist resolves to no addresses."""

    def __init__(
        self,
        timeout: float = 5.0,
        lifetime: float = 10.0,
        nameservers: list[str] | None = None,
    ) -> None:
        self.timeout = timeout
        self.lifetime = lifetime
        self.nameservers = nameservers or []
        self._resolver: dns.resolver.Resolver | None = None

    def _get_resolver(self) -> dns.resolver.Resolver:
        if self._resolver is None:
            resolver = dns.resolver.Resolver(configure=not self.nameservers)
            if self.nameservers:
                resolver.nameservers = self.nameservers
            resolver.timeout = self.timeout
            resolver.lifetime = self.lifetime
            self._resolver = resolver
        return self._resolver

    def resolve(self, name: str) -> list[str]:
        try:
            answers = self._get_resolver().resolve(name, "A")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return []
        except dns.exception.DNSException as exc:
            raise ResolverError(f"{name}: {exc.__class__.__name__}: {exc}") from exc
        return [rdata.to_text() for rdata in answers]

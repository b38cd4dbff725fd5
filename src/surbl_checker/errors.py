"""Exception hierarchy for SURBL lookups and TLD table maintenance."""

from __future__ import annotations


class SurblError(Exception):
    """Base class for everything raised by surbl_checker."""


class ConfigError(SurblError):
    """The cache directory cannot be created or used."""


class TldLoadError(SurblError, OSError):
    """A TLD table could be loaded from neither the remote source nor the cache."""


class NotLoadedError(SurblError, RuntimeError):
    """A TLD table was requested before any successful refresh."""


class MalformedInputError(SurblError, ValueError):
    """The hostname cannot be turned into a blacklist query (IPv6 literals)."""


class InvalidInputError(SurblError, ValueError):
    """The hostname has fewer than two labels."""


class TransientNetworkError(SurblError):
    """Fetching a remote TLD list failed; callers fall back to the cache."""


class ResolverError(SurblError):
    """A DNS query failed for a reason other than the name not existing."""


class BlacklistQueryError(SurblError):
    """A blacklist query failed and the checker runs in strict mode."""

"""Client for the SURBL domain blocklist."""

from .checker import SurblChecker
from .client import SURBL
from .errors import (
    BlacklistQueryError,
    ConfigError,
    InvalidInputError,
    MalformedInputError,
    NotLoadedError,
    SurblError,
    TldLoadError,
    TransientNetworkError,
)
from .models import CheckResult

__all__ = [
    "SURBL",
    "BlacklistQueryError",
    "CheckResult",
    "ConfigError",
    "InvalidInputError",
    "MalformedInputError",
    "NotLoadedError",
    "SurblChecker",
    "SurblError",
    "TldLoadError",
    "TransientNetworkError",
]

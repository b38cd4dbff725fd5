"""Remote source for the two-level and three-level TLD lists."""

from __future__ import annotations

from abc import ABC, abstractmethod
from email.utils import formatdate

import requests
import structlog

from .errors import TransientNetworkError
from .models import FetchResult, FetchStatus

log = structlog.get_logger()


class TldSource(ABC):
    """Backend-agnostic interface for retrieving a TLD list.

    Implementations:
        - HttpTldSource: conditional GET over HTTP(S) with requests
    """

    @abstractmethod
    def fetch(self, level: int, if_modified_since: float | None = None) -> FetchResult:
        """Fetch the list for `level` (2 or 3).

        `if_modified_since` is a POSIX timestamp; when given, an unchanged remote
        list yields FetchStatus.NOT_MODIFIED. Raises TransientNetworkError when
        the list cannot be retrieved.
        """


class HttpTldSource(TldSource):
    def __init__(
        self,
        urls: dict[int, str],
        connect_timeout: float = 30.0,
        read_timeout: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        self.urls = urls
        self.timeout = (connect_timeout, read_timeout)
        self._session = session or requests.Session()

    def fetch(self, level: int, if_modified_since: float | None = None) -> FetchResult:
        url = self.urls[level]
        headers = {}
        if if_modified_since is not None:
            headers["If-Modified-Since"] = formatdate(if_modified_since, usegmt=True)

        try:
            resp = self._session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransientNetworkError(f"GET {url} failed: {exc}") from exc

        if resp.status_code == requests.codes.not_modified:
            log.info("tld_fetch_not_modified", url=url)
            return FetchResult(url=url, status=FetchStatus.NOT_MODIFIED)
        if resp.status_code == requests.codes.ok:
            log.info("tld_fetch_ok", url=url, bytes=len(resp.content))
            return FetchResult(url=url, status=FetchStatus.FRESH, content=resp.content)

        raise TransientNetworkError(f"GET {url} returned HTTP {resp.status_code}")

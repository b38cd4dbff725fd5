from types import SimpleNamespace

import pytest
import requests

from surbl_checker.errors import TransientNetworkError
from surbl_checker.models import FetchStatus
from surbl_checker.tld_source import HttpTldSource

URLS = {2: "http://tlds.test/two-level-tlds", 3: "http://tlds.test/three-level-tlds"}


class FakeSession:
    def __init__(self, status_code=200, content=b"", exc=None):
        self.status_code = status_code
        self.content = content
        self.exc = exc
        self.requests = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append(SimpleNamespace(url=url, headers=headers, timeout=timeout))
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(status_code=self.status_code, content=self.content)


def test_fetch_ok_returns_content():
    session = FakeSession(200, b"co.uk\n")
    source = HttpTldSource(URLS, connect_timeout=3, read_timeout=7, session=session)
    result = source.fetch(2)
    assert result.status == FetchStatus.FRESH
    assert result.content == b"co.uk\n"
    req = session.requests[0]
    assert req.url == URLS[2]
    assert req.timeout == (3, 7)
    assert "If-Modified-Since" not in req.headers


def test_fetch_sends_if_modified_since():
    session = FakeSession(304)
    source = HttpTldSource(URLS, session=session)
    result = source.fetch(3, if_modified_since=0)
    assert result.status == FetchStatus.NOT_MODIFIED
    assert result.content == b""
    assert session.requests[0].headers["If-Modified-Since"] == "Thu, 01 Jan 1970 00:00:00 GMT"


def test_connection_error_is_transient():
    source = HttpTldSource(URLS, session=FakeSession(exc=requests.ConnectionError("refused")))
    with pytest.raises(TransientNetworkError):
        source.fetch(2)


def test_unexpected_status_is_transient():
    source = HttpTldSource(URLS, session=FakeSession(503))
    with pytest.raises(TransientNetworkError, match="HTTP 503"):
        source.fetch(2)

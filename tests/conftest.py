from __future__ import annotations

import os
import threading
import time
from types import SimpleNamespace

import pytest

from surbl_checker.cache_store import CacheStore
from surbl_checker.client import SURBL
from surbl_checker.errors import TransientNetworkError
from surbl_checker.models import FetchResult, FetchStatus
from surbl_checker.tld_source import TldSource
from surbl_checker.tld_tables import TldSnapshot

TWO_LEVEL = frozenset({"co.uk", "com.au", "ma.us"})
THREE_LEVEL = frozenset({"k12.ma.us", "blogspot.co.uk"})


class FakeSource(TldSource):
    def __init__(self) -> None:
        self.lists = {
            2: "\n".join(sorted(TWO_LEVEL)).encode() + b"\n",
            3: "\n".join(sorted(THREE_LEVEL)).encode() + b"\n",
        }
        self.calls: list[tuple[int, float | None]] = []
        self.fail = False
        self.not_modified = False

    def fetch(self, level: int, if_modified_since: float | None = None) -> FetchResult:
        self.calls.append((level, if_modified_since))
        url = f"http://tlds.test/level-{level}"
        if self.fail:
            raise TransientNetworkError(f"GET {url} failed: connection refused")
        if self.not_modified and if_modified_since is not None:
            return FetchResult(url=url, status=FetchStatus.NOT_MODIFIED)
        return FetchResult(url=url, status=FetchStatus.FRESH, content=self.lists[level])


class BlockingSource(FakeSource):
    """FakeSource whose fetches wait until `release` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()
        self.in_flight = 0
        self.max_in_flight = 0
        self._count_lock = threading.Lock()

    def fetch(self, level: int, if_modified_since: float | None = None) -> FetchResult:
        with self._count_lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.entered.set()
        try:
            assert self.release.wait(timeout=5)
            return super().fetch(level, if_modified_since)
        finally:
            with self._count_lock:
                self.in_flight -= 1


class FakeResolver:
    def __init__(self, answers: dict[str, list[str]] | None = None) -> None:
        self.answers = answers or {}
        self.queries: list[str] = []
        self.error: Exception | None = None

    def resolve(self, name: str) -> list[str]:
        self.queries.append(name)
        if self.error is not None:
            raise self.error
        return list(self.answers.get(name, []))


def make_stale(cache: CacheStore, level: int, hours: float = 48) -> None:
    old = time.time() - hours * 3600
    os.utime(cache.path_for(level), (old, old))


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "surbl-cache"


@pytest.fixture
def cache(cache_dir):
    return CacheStore(cache_dir)


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def tables():
    return SimpleNamespace(snapshot=TldSnapshot(level_two=TWO_LEVEL, level_three=THREE_LEVEL))


@pytest.fixture
def surbl(cache_dir, source, resolver):
    return SURBL(cache_dir, source=source, resolver=resolver)


@pytest.fixture
def loaded_surbl(surbl):
    surbl.load()
    return surbl

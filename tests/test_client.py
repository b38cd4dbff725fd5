import threading

import pytest

from conftest import BlockingSource, FakeResolver, FakeSource, make_stale
from surbl_checker import SURBL, CheckResult, ConfigError, MalformedInputError, NotLoadedError, TldLoadError


def test_invalid_cache_dir(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(ConfigError):
        SURBL(blocker / "cache", source=FakeSource(), resolver=FakeResolver())


def test_check_before_load(surbl):
    with pytest.raises(NotLoadedError):
        surbl.check("www.acme.com")


def test_load_then_reload_within_window(surbl):
    assert surbl.load() is True
    assert surbl.refresh() is False


def test_first_load_without_network_or_cache(cache_dir, resolver):
    source = FakeSource()
    source.fail = True
    with pytest.raises(TldLoadError):
        SURBL(cache_dir, source=source, resolver=resolver).load()


def test_acme_scenario(loaded_surbl, resolver):
    assert loaded_surbl.check("www.acme.com") is False
    resolver.answers["acme.com.multi.surbl.org."] = ["127.0.0.2"]
    assert loaded_surbl.check("www.acme.com") is True
    assert resolver.queries == ["acme.com.multi.surbl.org."] * 2


def test_co_uk_scenario(loaded_surbl):
    result = loaded_surbl.lookup("www.example.co.uk")
    assert result.level == 3
    assert result.domain == "example.co.uk"


def test_ipv6_scenario(loaded_surbl, resolver):
    with pytest.raises(MalformedInputError):
        loaded_surbl.check("2001:db8::1")
    assert resolver.queries == []


def test_zone_and_strict_overrides(cache_dir, source, resolver):
    surbl = SURBL(cache_dir, zone="black.uribl.test", strict=True, source=source, resolver=resolver)
    assert surbl.checker.zone == "black.uribl.test"
    assert surbl.checker.strict is True


def test_check_many_keeps_order(loaded_surbl, resolver):
    resolver.answers["spam.com.multi.surbl.org."] = ["127.0.0.16"]
    hosts = ["www.acme.com", "www.spam.com", "localhost", "mail.example.co.uk"]
    results = loaded_surbl.check_many(hosts, workers=4)
    assert [r.hostname for r in results] == hosts
    assert [r.listed for r in results] == [False, True, False, False]
    assert results[1].categories == ["malware"]


def test_check_many_propagates_input_errors(loaded_surbl):
    with pytest.raises(MalformedInputError):
        loaded_surbl.check_many(["www.acme.com", "2001:db8::1"], workers=2)


def test_check_many_can_return_input_errors(loaded_surbl):
    results = loaded_surbl.check_many(["2001:db8::1", "www.acme.com"], workers=2, return_exceptions=True)
    assert isinstance(results[0], MalformedInputError)
    assert isinstance(results[1], CheckResult)
    assert results[1].domain == "acme.com"


def test_check_many_while_refreshing(cache_dir, resolver):
    source = BlockingSource()
    source.release.set()
    surbl = SURBL(cache_dir, source=source, resolver=resolver)
    surbl.load()

    source.release.clear()
    source.entered.clear()
    make_stale(surbl.cache, 2)
    source.lists[2] = b"com.au\n"
    refresher = threading.Thread(target=surbl.load)
    refresher.start()
    assert source.entered.wait(timeout=5)

    results = surbl.check_many(["www.example.co.uk", "www.acme.com"], workers=2)
    assert [r.domain for r in results] == ["example.co.uk", "acme.com"]

    source.release.set()
    refresher.join(timeout=5)
    assert surbl.lookup("www.example.co.uk").domain == "co.uk"


def test_dns_timeout_overrides(cache_dir, source):
    surbl = SURBL(cache_dir, dns_timeout=1.5, dns_lifetime=4.0, source=source)
    assert surbl.resolver.timeout == 1.5
    assert surbl.resolver.lifetime == 4.0
    assert surbl.checker._resolver is surbl.resolver

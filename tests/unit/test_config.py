"""
Unit tests for ClientConfig.
"""

import pytest
from pydantic import ValidationError

from tsdb_client.config import ClientConfig, get_settings


def test_defaults():
    c = ClientConfig()
    assert c.hosts == ["localhost"]
    assert c.port == 8086
    assert (c.username, c.password) == ("root", "root")
    assert c.use_ssl is False
    assert c.time_precision == "s"
    assert c.initial_delay == 0.01
    assert c.max_delay == 30
    assert (c.open_timeout, c.read_timeout) == (5, 300)
    assert c.async_writes is False
    assert c.retry is True


def test_single_host_string_is_listified():
    assert ClientConfig(hosts="db1").hosts == ["db1"]


def test_empty_hosts_rejected():
    with pytest.raises(ValidationError):
        ClientConfig(hosts=[])


@pytest.mark.parametrize("initial,maximum", [(0, 1), (2, 1), (-1, 5)])
def test_backoff_bounds(initial, maximum):
    with pytest.raises(ValidationError):
        ClientConfig(initial_delay=initial, max_delay=maximum)


def test_initial_equal_to_max_is_valid():
    c = ClientConfig(initial_delay=1, max_delay=1)
    assert c.initial_delay == c.max_delay


def test_invalid_precision_rejected():
    with pytest.raises(ValidationError):
        ClientConfig(time_precision="h")


def test_unknown_overflow_policy_rejected():
    with pytest.raises(ValidationError):
        ClientConfig(queue_overflow="spill")


def test_config_is_frozen():
    c = ClientConfig()
    with pytest.raises(ValidationError):
        c.port = 1


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TSDB_PORT", "9999")
    monkeypatch.setenv("TSDB_HOSTS", '["a", "b"]')
    c = ClientConfig()
    assert c.port == 9999
    assert c.hosts == ["a", "b"]


def test_explicit_values_beat_environment(monkeypatch):
    monkeypatch.setenv("TSDB_PORT", "9999")
    assert ClientConfig(port=1234).port == 1234


def test_get_settings_is_cached(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.setenv("TSDB_DATABASE", "envdb")
    try:
        assert get_settings() is get_settings()
        assert get_settings().database == "envdb"
    finally:
        get_settings.cache_clear()

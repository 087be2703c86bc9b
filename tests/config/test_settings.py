import pytest

from nodeseed.config.settings import (
    FetchSettings,
    SettingsError,
    load_fetch_settings,
    parse_headers,
)


def test_defaults_when_env_is_empty():
    s = load_fetch_settings({})
    assert s == FetchSettings()
    assert s.url is None
    assert s.max_attempts == 10

    p = s.policy()
    assert p.max_attempts == 10
    assert p.deadline_seconds is None
    assert p.delay_seconds == 1.0


def test_env_overrides():
    s = load_fetch_settings({
        "NODESEED_URL": "http://169.254.169.254/userdata",
        "NODESEED_MAX_ATTEMPTS": "4",
        "NODESEED_DEADLINE": "120",
        "NODESEED_DELAY": "0.5",
        "NODESEED_BACKOFF": "2",
        "NODESEED_MAX_DELAY": "8",
        "NODESEED_TIMEOUT": "3",
        "NODESEED_HEADERS": "Metadata-Flavor=Google, X-Node = n1",
    })
    assert s.url == "http://169.254.169.254/userdata"
    assert s.max_attempts == 4
    assert s.deadline_seconds == 120.0
    assert s.timeout_seconds == 3.0
    assert s.headers == {"Metadata-Flavor": "Google", "X-Node": "n1"}

    p = s.policy()
    assert p.backoff_factor == 2.0
    assert p.delay_for(5) == 8.0


def test_empty_max_attempts_means_deadline_only():
    s = load_fetch_settings({"NODESEED_MAX_ATTEMPTS": "", "NODESEED_DEADLINE": "30"})
    assert s.max_attempts is None
    assert s.policy().deadline_seconds == 30.0


def test_unbounded_policy_is_rejected():
    s = load_fetch_settings({"NODESEED_MAX_ATTEMPTS": ""})
    with pytest.raises(SettingsError):
        s.policy()


def test_garbage_number_is_rejected():
    with pytest.raises(SettingsError, match="NODESEED_MAX_ATTEMPTS"):
        load_fetch_settings({"NODESEED_MAX_ATTEMPTS": "many"})


def test_bad_header_is_rejected():
    with pytest.raises(SettingsError):
        parse_headers("no-equals-sign")


def test_override_skips_none():
    s = FetchSettings(url="http://a").override(url=None, delay_seconds=0.0)
    assert s.url == "http://a"
    assert s.delay_seconds == 0.0


def test_reads_process_env(monkeypatch):
    monkeypatch.setenv("NODESEED_URL", "http://from-env/")
    assert load_fetch_settings().url == "http://from-env/"

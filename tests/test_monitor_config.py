"""Tests for MonitorConfig environment loading."""

from unittest.mock import patch

import pytest

from core.monitor.config import DEFAULT_POLL_INTERVAL_SECONDS, MonitorConfig
from core.monitor.transport import DEFAULT_RELAY_URL, DEFAULT_TIMEOUT_SECONDS


def test_from_env_defaults():
    with patch.dict("os.environ", {"SCORE_HOST_DOMAIN": "scores.example.com"}, clear=True):
        config = MonitorConfig.from_env()

    assert config.domain == "scores.example.com"
    assert config.maintenance_password is None
    assert config.relay_url == DEFAULT_RELAY_URL
    assert config.poll_interval_seconds == DEFAULT_POLL_INTERVAL_SECONDS
    assert config.request_timeout_seconds == DEFAULT_TIMEOUT_SECONDS


def test_from_env_overrides():
    env = {
        "SCORE_HOST_DOMAIN": "scores.example.com",
        "SCORE_HOST_MAINTENANCE_PASSWORD": "pw",
        "CORS_RELAY_URL": "https://relay.internal/?u=",
        "MONITOR_POLL_INTERVAL_SECONDS": "5",
        "MONITOR_REQUEST_TIMEOUT_SECONDS": "2.5",
    }
    with patch.dict("os.environ", env, clear=True):
        config = MonitorConfig.from_env()

    assert config.maintenance_password == "pw"
    assert config.relay_url == "https://relay.internal/?u="
    assert config.poll_interval_seconds == 5.0
    assert config.request_timeout_seconds == 2.5


def test_empty_relay_means_direct():
    env = {"SCORE_HOST_DOMAIN": "scores.example.com", "CORS_RELAY_URL": ""}
    with patch.dict("os.environ", env, clear=True):
        config = MonitorConfig.from_env()

    assert config.relay_url is None


def test_domain_argument_overrides_environment():
    with patch.dict("os.environ", {"SCORE_HOST_DOMAIN": "env.example.com"}, clear=True):
        config = MonitorConfig.from_env(domain="cli.example.com")

    assert config.domain == "cli.example.com"


def test_domain_argument_satisfies_requirement():
    with patch.dict("os.environ", {}, clear=True):
        config = MonitorConfig.from_env(domain="cli.example.com")

    assert config.domain == "cli.example.com"


def test_missing_domain_raises():
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(RuntimeError, match="SCORE_HOST_DOMAIN"):
            MonitorConfig.from_env()


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_invalid_interval_raises(value):
    env = {"SCORE_HOST_DOMAIN": "scores.example.com", "MONITOR_POLL_INTERVAL_SECONDS": value}
    with patch.dict("os.environ", env, clear=True):
        with pytest.raises(RuntimeError, match="MONITOR_POLL_INTERVAL_SECONDS"):
            MonitorConfig.from_env()


def test_password_not_in_repr():
    config = MonitorConfig(domain="scores.example.com", maintenance_password="hunter2")

    assert "hunter2" not in repr(config)

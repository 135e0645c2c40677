"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from CrptKit.DocumentSubmit.api import CrptApi
from CrptKit.DocumentSubmit.network.policy import DEMO_BASE_URL
from CrptKit.DocumentSubmit.ratelimit import WindowUnit
from CrptKit.DocumentSubmit.settings import LogLevel, SubmitSettings, get_settings, reset_settings

from .conftest import RecordingTransport


def test_defaults():
    settings = SubmitSettings()
    assert settings.base_url == DEMO_BASE_URL
    assert settings.window_unit is WindowUnit.SECOND
    assert settings.max_requests_per_window == 10
    assert settings.token is None
    assert settings.log_dir is None


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CRPT_BASE_URL", "https://ismp.crpt.ru/api/v3/")
    monkeypatch.setenv("CRPT_WINDOW_UNIT", "min")
    monkeypatch.setenv("CRPT_MAX_REQUESTS_PER_WINDOW", "100")
    monkeypatch.setenv("CRPT_REQUEST_TIMEOUT_S", "12.5")
    monkeypatch.setenv("CRPT_TOKEN", "secret-token")
    monkeypatch.setenv("CRPT_LOG_LEVEL", "debug")
    monkeypatch.setenv("CRPT_LOG_DIR", str(tmp_path))

    settings = SubmitSettings()

    assert settings.base_url == "https://ismp.crpt.ru/api/v3"
    assert settings.window_unit is WindowUnit.MINUTE
    assert settings.max_requests_per_window == 100
    assert settings.request_timeout_s == 12.5
    assert settings.token.get_secret_value() == "secret-token"
    assert settings.log_level is LogLevel.DEBUG
    assert settings.log_dir == Path(tmp_path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"base_url": "   "},
        {"max_requests_per_window": 0},
        {"request_timeout_s": 0},
        {"window_unit": "fortnight"},
        {"log_level": "chatty"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        SubmitSettings(**overrides)


def test_masked_dump_hides_token():
    dumped = SubmitSettings(token="secret-token").masked_dump()
    assert dumped["token"] == "***masked***"
    assert dumped["window_unit"] == "second"
    assert "secret-token" not in str(dumped)


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("CRPT_MAX_REQUESTS_PER_WINDOW", "3")
    assert get_settings().max_requests_per_window == first.max_requests_per_window

    reset_settings()
    assert get_settings().max_requests_per_window == 3


def test_quota_shorthand_overrides_limit_and_unit(monkeypatch):
    monkeypatch.setenv("CRPT_QUOTA", "250/min")
    monkeypatch.setenv("CRPT_MAX_REQUESTS_PER_WINDOW", "3")

    settings = SubmitSettings()

    assert settings.max_requests_per_window == 250
    assert settings.window_unit is WindowUnit.MINUTE


@pytest.mark.parametrize("quota", ["0/second", "ten per second", "5/fortnight"])
def test_invalid_quota_rejected(quota):
    with pytest.raises(ValidationError):
        SubmitSettings(quota=quota)


def test_quota_feeds_client_limiter():
    with CrptApi.from_settings(SubmitSettings(quota="4/hour"), transport=RecordingTransport()) as api:
        assert api.pipeline.rate_limiter.capacity == 4
        assert api.pipeline.rate_limiter.window == 3600.0

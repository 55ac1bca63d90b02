"""Tests for configuration parsing and the frozen settings objects."""

from __future__ import annotations

from datetime import timedelta

import pytest
from vidtube.core.config import (
    ConfigurationError,
    DevelopmentConfig,
    MediaSettings,
    ProductionConfig,
    TestingConfig,
    TokenSettings,
    env_bool,
    get_config,
    parse_duration,
)
from vidtube.factory import create_app


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("15m", timedelta(minutes=15)),
        ("10d", timedelta(days=10)),
        (" 2H ", timedelta(hours=2)),
        ("1w", timedelta(weeks=1)),
        ("3600", timedelta(seconds=3600)),
        ("45s", timedelta(seconds=45)),
        (90, timedelta(seconds=90)),
        (timedelta(minutes=1), timedelta(minutes=1)),
    ],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "ten minutes", "5y", "0", "-5m", 0])
def test_parse_duration_rejects(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_env_bool(monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    assert env_bool("FLAG") is True
    monkeypatch.setenv("FLAG", "off")
    assert env_bool("FLAG", True) is False
    monkeypatch.delenv("FLAG")
    assert env_bool("FLAG", True) is True


@pytest.mark.parametrize(
    "name,cls",
    [("testing", TestingConfig), ("PRODUCTION", ProductionConfig), ("weird", DevelopmentConfig)],
)
def test_get_config(monkeypatch, name, cls):
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is cls


class TestTokenSettings:
    BASE = {
        "ACCESS_TOKEN_SECRET": "a",
        "REFRESH_TOKEN_SECRET": "r",
        "ACCESS_TOKEN_EXPIRY": "15m",
        "REFRESH_TOKEN_EXPIRY": "10d",
    }

    def test_from_mapping(self):
        s = TokenSettings.from_mapping(self.BASE)
        assert s.access_expires == timedelta(minutes=15)
        assert s.refresh_expires == timedelta(days=10)
        assert s.algorithm == "HS256"

    @pytest.mark.parametrize("key", ["ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET"])
    def test_missing_secret(self, key):
        with pytest.raises(ConfigurationError):
            TokenSettings.from_mapping({**self.BASE, key: ""})

    def test_shared_secret_rejected(self):
        with pytest.raises(ConfigurationError, match="distinct"):
            TokenSettings.from_mapping({**self.BASE, "REFRESH_TOKEN_SECRET": "a"})

    def test_bad_expiry(self):
        with pytest.raises(ConfigurationError):
            TokenSettings.from_mapping({**self.BASE, "ACCESS_TOKEN_EXPIRY": "soon"})


def test_media_settings_configured():
    assert not MediaSettings.from_mapping({}).configured
    full = MediaSettings.from_mapping(
        {
            "CLOUDINARY_CLOUD_NAME": "demo",
            "CLOUDINARY_API_KEY": "k",
            "CLOUDINARY_API_SECRET": "s",
            "MEDIA_TIMEOUT_SECONDS": "7.5",
        }
    )
    assert full.configured
    assert full.timeout == 7.5


def test_app_refuses_to_start_without_secrets():
    class NoSecrets(TestingConfig):
        ACCESS_TOKEN_SECRET = ""
        REFRESH_TOKEN_SECRET = ""

    with pytest.raises(ConfigurationError):
        create_app(NoSecrets)


def test_app_mirrors_access_settings_into_jwt_config(app):
    assert app.config["JWT_SECRET_KEY"] == TestingConfig.ACCESS_TOKEN_SECRET
    assert app.config["JWT_ACCESS_TOKEN_EXPIRES"] == timedelta(minutes=15)

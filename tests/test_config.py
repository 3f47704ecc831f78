"""Tests for environment-driven settings and property formatting."""

import pytest

from cloudhost.core.config import DEFAULT_API_URL, load_settings
from cloudhost.core.property_formatter import format_value, get_nested


def test_defaults(monkeypatch):
    for name in ("CLOUDHOST_API_URL", "CLOUDHOST_ORGANIZATIONS", "CLOUDHOST_ACTIVITY_TIMEOUT", "CLOUDHOST_API_RETRIES"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.api_url == DEFAULT_API_URL
    assert settings.organizations_enabled is False
    assert settings.activity_timeout is None
    assert settings.retries == 2


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLOUDHOST_API_URL", "https://api.internal.test/")
    monkeypatch.setenv("CLOUDHOST_ORGANIZATIONS", "yes")
    monkeypatch.setenv("CLOUDHOST_ACTIVITY_TIMEOUT", "90")
    monkeypatch.setenv("CLOUDHOST_CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("CLOUDHOST_API_TIMEOUT", "not-a-number")
    settings = load_settings()
    assert settings.api_url == "https://api.internal.test"
    assert settings.organizations_enabled is True
    assert settings.activity_timeout == 90.0
    assert settings.cache_dir == tmp_path
    assert settings.timeout == 30.0


def test_format_value():
    assert format_value(None) == ""
    assert format_value(True) == "true"
    assert format_value(5120, "storage") == "5120"
    assert format_value({"b": 1, "a": 2}) == '{\n  "a": 2,\n  "b": 1\n}'
    assert format_value("2024-01-02T03:04:05+00:00", "created_at") == "2024-01-02 03:04:05 UTC"


def test_get_nested():
    data = {"owner_info": {"type": "user", "id": "u1"}}
    assert get_nested(data, "owner_info.id") == "u1"
    with pytest.raises(KeyError):
        get_nested(data, "owner_info.missing")

from pathlib import Path

import pytest

from rentals.core.config import DEFAULT_GEOLOCATION_URL, Settings


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setenv("SUPABASE_PUBLISHABLE_KEY", "pk")
    monkeypatch.setenv("CHAT_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("RENTALS_STATE_PATH", "/tmp/rentals-state.json")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("CHAT_URL", raising=False)
    monkeypatch.delenv("GEOLOCATION_URL", raising=False)

    settings = Settings.from_env()

    assert settings.chat_url == "https://project.supabase.co/functions/v1/chat"
    assert settings.chat_timeout_seconds is None
    assert settings.state_path == Path("/tmp/rentals-state.json")
    assert settings.geolocation_url == DEFAULT_GEOLOCATION_URL
    assert settings.log_level == "DEBUG"


def test_anon_key_is_accepted_and_timeout_parsed(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.delenv("SUPABASE_PUBLISHABLE_KEY", raising=False)
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("CHAT_TIMEOUT_SECONDS", "30")

    settings = Settings.from_env()

    assert settings.supabase_key == "anon"
    assert settings.chat_timeout_seconds == 30.0


def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.setenv("SUPABASE_PUBLISHABLE_KEY", "pk")

    with pytest.raises(ValueError):
        Settings.from_env()

"""Tests for configuration loading."""

import pytest

from src.config import (
    AppSettings,
    MisconfigurationError,
    get_settings,
    require_backend_settings,
    validate_all_settings,
)
from src.orchestrator import create_app_components
from src.services.storage import InMemoryFnaStorage


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """No inherited SUPABASE_* variables and no .env file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestBackendSettings:
    """Tests for the required backend configuration."""

    def test_missing_configuration_is_fatal(self):
        with pytest.raises(MisconfigurationError) as exc_info:
            require_backend_settings()

        message = str(exc_info.value)
        assert "SUPABASE_URL" in message
        assert "SUPABASE_ANON_KEY" in message

    def test_configured(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co/")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")

        settings = require_backend_settings()

        assert settings.url == "https://example.supabase.co"
        assert settings.anon_key == "anon"
        assert settings.header_table == "fna_header"

    def test_url_must_be_http(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "example.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")

        with pytest.raises(MisconfigurationError, match="SUPABASE_URL"):
            require_backend_settings()

    def test_validate_all_settings(self, monkeypatch):
        assert validate_all_settings()["supabase"] is False

        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        assert validate_all_settings() == {"supabase": True, "app": True}


class TestAppSettings:
    def test_defaults(self):
        settings = AppSettings()
        assert settings.auth_entry_path == "/auth"
        assert settings.api_base_url == "http://localhost:8000"
        assert not hasattr(settings, "pdf_url")


class TestComponents:
    """Tests for the component factory."""

    def test_backend_required(self):
        with pytest.raises(MisconfigurationError):
            create_app_components(use_storage=True)

    def test_offline_mode(self):
        intake, dashboard, supabase_client = create_app_components(use_storage=False)

        assert supabase_client is None
        assert isinstance(intake.controller._storage, InMemoryFnaStorage)

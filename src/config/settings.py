"""
Configuration Management for FNA Intake

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The backend URL and anonymous key are required. If either is missing the
process refuses to start instead of limping along without storage.
"""

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MisconfigurationError(RuntimeError):
    """Required configuration is missing at process start."""
    pass


class SupabaseSettings(BaseSettings):
    """Hosted backend (Supabase) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Supabase project URL"
    )
    anon_key: str = Field(
        ...,
        description="Supabase anonymous (public) access key"
    )

    # Table names
    clients_table: str = Field(
        default="clientregistrations",
        description="Table holding client records"
    )
    header_table: str = Field(
        default="fna_header",
        description="Table holding one FNA header per client"
    )
    sessions_table: str = Field(
        default="fna_sessions",
        description="Table listed on the dashboard"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Backend URL must be absolute."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"SUPABASE_URL must be an http(s) URL, got: {v!r}")
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Auth
    auth_entry_path: str = Field(
        default="/auth",
        description="Where unauthenticated callers are redirected"
    )
    session_cookie_name: str = Field(
        default="sb-access-token",
        description="Cookie carrying the backend access token"
    )

    # Documents
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the document API (shown on the settings page)"
    )
    pdf_font_family: str = Field(
        default="Helvetica",
        description="Core font used for rendered documents"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the app settings can be read
    # even when the backend is not configured (e.g. in tests).

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def require_backend_settings() -> SupabaseSettings:
    """
    Load the backend settings or fail loudly.

    Called once at process start. Missing SUPABASE_URL / SUPABASE_ANON_KEY
    is a fatal misconfiguration.

    Raises:
        MisconfigurationError: naming every missing or invalid variable
    """
    try:
        return get_settings().supabase
    except ValidationError as e:
        problems = []
        for error in e.errors():
            name = "SUPABASE_" + "_".join(str(part) for part in error["loc"]).upper()
            problems.append(f"{name}: {error['msg']}")
        raise MisconfigurationError(
            "Backend is not configured. " + "; ".join(problems)
        ) from e


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus {name}_error entries.
    Useful for startup checks and status display.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    try:
        _ = settings.supabase
        results["supabase"] = True
    except ValidationError as e:
        results["supabase"] = False
        results["supabase_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except ValidationError as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results


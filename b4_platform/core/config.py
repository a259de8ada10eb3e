"""Application configuration."""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlencode

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)


def find_env_file() -> Optional[Path]:
    """Find .env file in the package, its parent, or the project root."""
    current_dir = os.path.dirname(os.path.abspath(__file__))

    possible_paths = [
        os.path.join(current_dir, ".env"),
        os.path.join(os.path.dirname(current_dir), ".env"),
        os.path.join(os.path.dirname(os.path.dirname(current_dir)), ".env"),
    ]

    for path_str in possible_paths:
        if os.path.exists(path_str):
            path = Path(path_str)
            LOGGER.info(f"Found .env file at: {path}")
            return path

    LOGGER.warning("No .env file found in expected locations")
    return None


ENV_FILE = find_env_file()


class DatabaseSettings(BaseSettings):
    """Database connection and pool settings."""
    url: str = Field(default="postgresql+asyncpg://b4:b4@localhost:5432/b4_platform", validation_alias="DATABASE_URL")
    postgres_url: Optional[str] = Field(default=None, validation_alias="POSTGRES_URL")
    postgres_url_non_pooling: Optional[str] = Field(default=None, validation_alias="POSTGRES_URL_NON_POOLING")

    pool_size: int = Field(default=10, validation_alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(default=20, validation_alias="DATABASE_MAX_OVERFLOW")
    echo: bool = Field(default=False, validation_alias="DATABASE_ECHO")

    use_local_db: bool = Field(default=True, validation_alias="USE_LOCAL_DB")

    @property
    def connection_url(self) -> str:
        """Get the connection URL with the asyncpg driver prefix."""
        if self.use_local_db:
            raw_url = self.url
        else:
            raw_url = self.postgres_url or self.postgres_url_non_pooling or self.url

        if not raw_url:
            return ""

        if raw_url.startswith("postgres://") or raw_url.startswith("postgresql://"):
            _, rest = raw_url.split("://", 1)

            if "?" in rest:
                path, query = rest.split("?", 1)
                params = parse_qs(query)

                # asyncpg expects `ssl`, not libpq's `sslmode`
                if "sslmode" in params:
                    params["ssl"] = params.pop("sslmode")

                # Supabase pooler hint, unknown to asyncpg
                params.pop("supa", None)

                rest = f"{path}?{urlencode(params, doseq=True)}"

            return f"postgresql+asyncpg://{rest}"

        return raw_url

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class SupabaseSettings(BaseSettings):
    """Supabase authentication and storage settings."""
    url: str = Field(default="", validation_alias="SUPABASE_URL")
    anon_key: str = Field(default="", validation_alias="SUPABASE_ANON_KEY")
    jwt_secret: str = Field(default="", validation_alias="SUPABASE_JWT_SECRET")
    service_role_key: str = Field(default="", validation_alias="SUPABASE_SERVICE_ROLE_KEY")
    jwks_cache_ttl: int = Field(default=3600, validation_alias="SUPABASE_JWKS_CACHE_TTL")  # 1 hour
    storage_bucket: str = Field(default="journey-documents", validation_alias="SUPABASE_STORAGE_BUCKET")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class EmailSettings(BaseSettings):
    """Transactional email (Resend) settings."""
    resend_api_key: str = Field(default="", validation_alias="RESEND_API_KEY")
    resend_api_url: str = Field(default="https://api.resend.com/emails", validation_alias="RESEND_API_URL")
    sender: str = Field(default="B4 Platform <onboarding@resend.dev>", validation_alias="EMAIL_FROM")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )

    def model_post_init(self, __context) -> None:
        """Log whether email delivery is configured."""
        LOGGER.info(f"Resend API Key present: {bool(self.resend_api_key)}")


class PlatformSettings(BaseSettings):
    """Journey, auto-save, and account lifecycle settings."""
    autosave_debounce_seconds: float = Field(default=1.0, validation_alias="AUTOSAVE_DEBOUNCE_SECONDS")
    deletion_code_ttl_minutes: int = Field(default=15, validation_alias="DELETION_CODE_TTL_MINUTES")
    notification_poll_interval: float = Field(default=2.0, validation_alias="NOTIFICATION_POLL_INTERVAL")
    app_base_url: str = Field(default="https://b4-platform.lovable.app", validation_alias="APP_BASE_URL")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class Settings(BaseSettings):
    """Unified application settings with nested models."""

    # Application Settings
    app_name: str = Field(default="B4 Platform API", validation_alias="APP_NAME")
    app_version: str = "0.1.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=True, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173", "https://b4-platform.lovable.app"],
        validation_alias="CORS_ORIGINS"
    )

    # API Settings
    api_v1_prefix: str = "/api/v1"
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")

    # Timeout Settings
    http_timeout: int = 60
    db_init_timeout: int = 30  # Seconds to wait for DB during startup

    # Nested Settings
    db: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    supabase: SupabaseSettings = Field(default_factory=lambda: SupabaseSettings())
    email: EmailSettings = Field(default_factory=lambda: EmailSettings())
    platform: PlatformSettings = Field(default_factory=lambda: PlatformSettings())

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backward compatibility properties
    @property
    def database_url(self) -> str:
        return self.db.connection_url

    @property
    def database_pool_size(self) -> int:
        return self.db.pool_size

    @property
    def database_max_overflow(self) -> int:
        return self.db.max_overflow

    @property
    def database_echo(self) -> bool:
        return self.db.echo

    @property
    def supabase_url(self) -> str:
        return self.supabase.url

    @property
    def supabase_anon_key(self) -> str:
        return self.supabase.anon_key

    @property
    def supabase_service_role_key(self) -> str:
        return self.supabase.service_role_key

    @property
    def supabase_jwt_secret(self) -> str:
        return self.supabase.jwt_secret

    @property
    def supabase_jwks_cache_ttl(self) -> int:
        return self.supabase.jwks_cache_ttl

    @property
    def storage_bucket(self) -> str:
        return self.supabase.storage_bucket

    @property
    def autosave_debounce_seconds(self) -> float:
        return self.platform.autosave_debounce_seconds


# Initialize settings
settings = Settings()

LOGGER.info(f"Settings initialized with environment: {settings.environment}")
LOGGER.info(f"Database settings: local={settings.db.use_local_db}, pool={settings.db.pool_size}")

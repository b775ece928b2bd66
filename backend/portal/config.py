"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (defaults are for local development only)
    - get_settings() is cached (lru_cache): one instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_name: str = "STMADB Portal Backend"
    app_version: str = "1.0.0"
    environment: str = "development"

    # Database
    database_url: str = (
        "postgresql+asyncpg://portal:portal@db:5432/portal"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth
    jwt_secret: str = "change-me-access-secret"
    jwt_refresh_secret: str = "change-me-refresh-secret"
    jwt_access_expires_minutes: int = 60 * 24
    jwt_refresh_expires_days: int = 7
    bcrypt_rounds: int = 12

    # Calendar used for "same day" attendance rules
    school_timezone: str = "Asia/Jakarta"

    @field_validator("school_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        ZoneInfo(v)
        return v

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.school_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()

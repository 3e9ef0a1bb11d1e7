"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    database_pool_timeout_seconds: int = Field(
        default=10,
        description="Seconds to wait for a pooled connection before failing",
        gt=0,
    )
    secret_key: str = Field(
        description="Secret key used to verify the bearer tokens issued by the auth service",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="Asia/Kolkata",
        description="Timezone used to stamp and store notification dates",
    )
    cors_allowed_origins: str = Field(
        default="http://localhost:5173",
        description="Comma separated list of origins allowed to open channels",
    )
    notification_page_size: int = Field(
        default=20,
        description="Default page size for notification feeds",
        gt=0,
    )
    notification_page_size_max: int = Field(
        default=100,
        description="Largest page size a client may request",
        gt=0,
    )
    notification_sweep_interval_seconds: int = Field(
        default=300,
        description="Seconds between expiry sweeps; 0 disables the sweeper",
        ge=0,
    )

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> "Settings":
        if self.notification_page_size > self.notification_page_size_max:
            raise ValueError(
                "NOTIFICATION_PAGE_SIZE cannot exceed NOTIFICATION_PAGE_SIZE_MAX"
            )
        return self

    @property
    def allowed_origins(self) -> list[str]:
        """Return the CORS allow-list as a list of origins."""

        return [
            origin.strip()
            for origin in self.cors_allowed_origins.split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]

"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APIEnvironmentName = Literal["alpha", "beta", "pre_prod", "prod"]

# Literal port of the "yyyy-mm-dd" decoder format ("mm" is minutes there too)
DEFAULT_JSON_DATE_FORMAT = "%Y-%M-%d"
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_UPLOAD_MAX_BYTES = 25 * 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ----- Application -----
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False

    # ----- API Environment -----
    # Selects which base URL table is active for the process lifetime
    api_environment: APIEnvironmentName = "beta"
    api_base_url_alpha: str = ""
    api_base_url_beta: str = ""
    api_base_url_pre_prod: str = ""
    api_base_url_prod: str = ""

    # ----- HTTP -----
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    upload_max_bytes: int = Field(default=DEFAULT_UPLOAD_MAX_BYTES, gt=0)
    # Worker threads used to build multipart bodies; unset derives from CPU count
    blocking_io_limit: int | None = Field(default=None, gt=0)
    json_date_format: str = Field(
        default=DEFAULT_JSON_DATE_FORMAT,
        description="strptime format applied to ApiDate fields when decoding responses",
    )

    # ----- SSL Pinning -----
    ssl_pinning_enabled: bool = True
    pinned_certificate_path: Path | None = None

    @property
    def base_urls(self) -> dict[str, str]:
        """Base URL table keyed by API environment name."""
        return {
            "alpha": self.api_base_url_alpha,
            "beta": self.api_base_url_beta,
            "pre_prod": self.api_base_url_pre_prod,
            "prod": self.api_base_url_prod,
        }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Ensure secure settings in production environment."""
        if self.is_production:
            if self.app_debug:
                raise ValueError("APP_DEBUG must be false in production!")
            if not self.ssl_pinning_enabled:
                raise ValueError("SSL_PINNING_ENABLED must be true in production!")
            if self.pinned_certificate_path is None:
                raise ValueError("PINNED_CERTIFICATE_PATH must be set in production!")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

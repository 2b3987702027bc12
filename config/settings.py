"""Message board client settings loaded from the environment / .env file."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "http://localhost:8080/api/v1"


class Settings(BaseSettings):
    """Runtime configuration (env prefix BOARD_)."""

    api_base_url: str = DEFAULT_API_BASE_URL

    # HTTP client timeouts (seconds)
    http_read_timeout: float = Field(30.0, gt=0)
    http_write_timeout: float = Field(10.0, gt=0)
    http_connect_timeout: float = Field(2.0, gt=0)

    # Outbound throttle: N requests per window seconds
    service_rate_limit: int = Field(40, ge=1)
    service_rate_window: float = Field(60.0, gt=0)

    log_file: str = "board.log"
    log_level: str = "INFO"
    log_rotation: str = "10 MB"
    log_retention: int = Field(5, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="BOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("api_base_url must not be empty")
        return v.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    # Application settings
    app_name: str = "payments-replay"
    app_version: str = "1.0.0"
    debug: bool = False

    # Logging settings, all output goes to stderr
    log_level: str = "WARNING"
    log_format: Literal["json", "text"] = "json"

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

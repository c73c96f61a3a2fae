"""Settings loaded from the environment (prefix ``FILTERCRAFT_``)."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class FilterCraftSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FILTERCRAFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    database_url: str = "sqlite:///:memory:"
    echo_sql: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> FilterCraftSettings:
    """Get cached settings instance."""
    return FilterCraftSettings()

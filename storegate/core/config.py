from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "storegate"
    debug: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # YAML file with module aliases and guard settings
    config_path: Optional[str] = None

    # Route guard
    fallback_path: Optional[str] = None  # overrides guard.fallback_path from the YAML file
    loading_retry_after: int = 1  # seconds

    model_config = SettingsConfigDict(
        env_prefix="STOREGATE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()

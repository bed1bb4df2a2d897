"""Process configuration using pydantic-settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-level settings read from the environment or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Integrations config file (defaults to the platform config dir)
    URL_READERS_CONFIG: Optional[Path] = None

    # Logging
    URL_READERS_LOG_LEVEL: str = "INFO"
    URL_READERS_LOG_DIR: Optional[Path] = None


settings = Settings()

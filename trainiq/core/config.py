"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "TrainIQ Training Intelligence Engine"
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = ["TrainIQ contributors"]
    PROJECT_URL: Optional[str] = None

    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Database
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_DBNAME: str = "trainiq"

    # Engine defaults (weeks)
    CONTEXT_WINDOW_WEEKS: int = 8
    LOAD_WINDOW_WEEKS: int = 4
    FATIGUE_WINDOW_WEEKS: int = 12

    # Weight increments are rounded to this quantum (kg)
    WEIGHT_QUANTUM: float = 0.25

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        return (f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}"
                f":{self.DATABASE_PORT}/{self.DATABASE_DBNAME}")


# Global settings instance
settings = Settings()

"""
Application Configuration
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "JobTrack"
    debug: bool = True
    sql_echo: bool = False
    # DEBUG, INFO, WARNING...; defaults to DEBUG when debug is on
    log_level: Optional[str] = None
    api_port: int = 8000
    frontend_url: str = "http://localhost:9002"

    # Database (PostgreSQL)
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "jobtrack"
    db_user: str = "postgres"
    db_password: str = "postgres"

    # Full async URL, overrides the db_* fields (e.g. sqlite+aiosqlite:///./jobtrack.db)
    database_url: Optional[str] = None

    # Auth
    session_duration_hours: int = 24
    google_client_id: str = ""
    google_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.1
    openai_max_tokens: int = 2000

    # Analytics
    first_response_event_name: str = "first_response"

    @property
    def async_database_url(self) -> str:
        """Get async database URL."""
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origins(self) -> list[str]:
        return ["*"] if self.debug else [self.frontend_url]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

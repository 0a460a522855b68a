from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./workouts.db"
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout_seconds: float = 60.0
    day_format: str = "%a %b %d %Y"  # e.g. "Sat Oct 17 2026"
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:3000"  # used by the CLI

    class Config:
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROGRAM_DURATION_WEEKS: int = 4
    PROGRAM_CATALOG_PATH: str | None = None
    PROGRAM_SUPERSET_MAX_SESSION_MINUTES: int = 45
    PROGRAM_BUDGET_TOLERANCE_MINUTES: float = 1.0
    PROGRAM_GAP_FILL_THRESHOLD_MINUTES: float = 3.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()

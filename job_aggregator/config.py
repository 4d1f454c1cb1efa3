from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Configuration for the aggregator, read from the environment and `.env`.
    """

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream credentials; a source without them is disabled, not failing.
    RAPIDAPI_KEY: Optional[str] = None
    ADZUNA_APP_ID: Optional[str] = None
    ADZUNA_APP_KEY: Optional[str] = None

    # Caching
    CACHE_TTL_SECONDS: float = 60 * 60
    EDGE_CACHE_CONTROL: str = "s-maxage=600, stale-while-revalidate"

    # Upstream calls
    HTTP_TIMEOUT_SECONDS: float = 20.0
    JSEARCH_CATEGORIES_PER_CYCLE: int = 3

    # Response shape
    MAX_RESULTS: int = 200

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    @property
    def jsearch_enabled(self) -> bool:
        return bool(self.RAPIDAPI_KEY)

    @property
    def adzuna_enabled(self) -> bool:
        return bool(self.ADZUNA_APP_ID and self.ADZUNA_APP_KEY)

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # `.env.prod` takes priority over `.env`
        env_file=(".env", ".env.prod")
    )

    # Database (see database._build_database_url for the fallbacks)
    database_url: Optional[str] = None

    # Logging
    log_format: str = "json"
    log_level: str = "INFO"

    # Auth for the mutation endpoints (disabled for local dev)
    auth_enabled: bool = False
    auth_jwks_url: Optional[str] = None
    auth_issuer: Optional[str] = None
    auth_audience: Optional[str] = None

    # Browser origins allowed to call the API
    cors_origins: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]


@lru_cache()
def get_settings() -> Settings:
    return Settings()

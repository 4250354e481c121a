"""Application configuration.

Values come from environment variables, with a ``.env`` file as fallback.
:func:`get_settings` builds the settings once per process.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY"),
    )
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False
    log_level: str = "info"
    # JSON list in the environment, e.g. CORS_ORIGINS='["https://app.example.com"]'
    cors_origins: List[str] = ["*"]
    # Rows per PostgREST page while scanning invoices for reconciliation
    scan_page_size: int = Field(1000, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Backend connection settings live in RemoteProviderConfig (REMOTE_PROVIDER_*).
    - These cover the web layer only and can be overridden via APP_* env vars.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    log_level: str = "INFO"
    provider_log_level: str | None = None
    token_cookie_name: str = "token"


@lru_cache
def get_settings() -> Settings:
    return Settings()

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Fastly stats API
    fastly_service_id: str | None = None
    fastly_api_key: str | None = None
    fastly_api_url: str = "https://api.fastly.com"

    # Pingdom API
    pingdom_check_id: str | None = None
    pingdom_api_key: str | None = None
    pingdom_account: str | None = None
    pingdom_username: str | None = None
    pingdom_password: str | None = None
    pingdom_api_url: str = "https://api.pingdom.com/api/2.0"

    # Provider cache
    cache_ttl_seconds: float = 1800

    # HTTP client
    http_timeout: float = 10.0
    http_verify_ssl: bool = True

    # File-backed support registry (both must be set to enable it)
    compat_data_path: str | None = None
    polyfill_metadata_path: str | None = None

    # Logging
    log_level: str = "INFO"


settings = Settings()

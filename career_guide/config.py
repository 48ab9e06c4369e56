"""
config.py — Client settings loaded from environment variables.

Using pydantic-settings means:
- Every setting is type-validated at startup
- Defaults are documented alongside the setting
- Pointing the UI at another backend = change API_BASE_URL, zero code
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # ── Backend ───────────────────────────────────────────────────────────────
    # No default: every flow refuses to dispatch until this is configured.
    api_base_url: str | None = None
    request_timeout_s: float = 30.0

    # ── Input validation ──────────────────────────────────────────────────────
    input_min_length: int = 2
    input_max_length: int = 100

    # ── App ───────────────────────────────────────────────────────────────────
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def endpoint_url(self, path: str) -> str:
        """Join the base URL and an endpoint path without doubling slashes."""
        base = (self.api_base_url or "").rstrip("/")
        return f"{base}/{path.lstrip('/')}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached settings instance; reads .env once at startup.
    Use get_settings() everywhere instead of instantiating Settings() directly.
    """
    return Settings()

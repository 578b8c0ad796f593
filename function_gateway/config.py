"""Configuration management using Pydantic Settings."""

from __future__ import annotations

import json
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_list(v: object) -> list[str]:
    """Parse a list from either a JSON array string, comma-separated string, or list."""
    if v is None:
        return []
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return []
        if v.startswith("["):
            return json.loads(v)
        return [item.strip() for item in v.split(",") if item.strip()]
    return list(v)  # type: ignore[arg-type]


class Settings(BaseSettings):
    """Gateway settings loaded from environment variables."""

    # Signed-key auth. Tokens are HMAC-SHA256(signing_secret, account_id)
    # and never expire; rotating the secret invalidates all of them.
    signing_secret: str = ""
    account_id: str = ""

    # HTTP
    base_path: str = ""
    host: str = "0.0.0.0"
    port: int = 8000
    # Stored as str, comma-separated or JSON array. Use parse_list().
    cors_origins: str = "*"

    # Invocation
    # Overall per-call budget in seconds; 0 disables the timeout.
    invocation_timeout_seconds: float = 30.0
    # Builtin categories loaded (hidden) at startup: "all", "" or a list
    # such as "math,text".
    builtin_categories: str = ""

    # Config store. Empty redis_url keeps hook values in process memory.
    redis_url: str = ""
    config_key_prefix: str = "gateway_configs"
    # Expiry for stored hook values in seconds; 0 keeps them indefinitely.
    config_ttl_seconds: int = 0

    log_level: str = "info"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def call_timeout(self) -> float | None:
        """Timeout to hand to the registry, or None when disabled."""
        if self.invocation_timeout_seconds <= 0:
            return None
        return self.invocation_timeout_seconds


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

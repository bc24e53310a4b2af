"""
Process configuration from environment variables.

Read once at startup; nothing is reloaded at runtime.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from transgate.cache_store import DEFAULT_TTL
from transgate.logger import setup_logger
from transgate.tokens import DEFAULT_BYPASS_TOKEN
from transgate.translation_client import DEFAULT_TRANSLATION_API_URL

log = setup_logger("transgate.config")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


@dataclass
class Settings:
    """Gateway settings."""
    translation_key: Optional[str] = None
    server_secret: Optional[str] = None
    use_cache: bool = False
    cache_url: str = "redis://localhost:6379"
    cache_ttl: int = DEFAULT_TTL
    bypass_token: Optional[str] = DEFAULT_BYPASS_TOKEN
    translation_api_url: str = DEFAULT_TRANSLATION_API_URL
    upstream_timeout: float = 30.0
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from the environment.

        A .dev.env file is loaded when present, otherwise .env. Variables
        already set in the environment win over the files.
        """
        if os.path.exists(".dev.env"):
            load_dotenv(".dev.env")
        else:
            load_dotenv(".env")

        settings = cls(
            translation_key=os.getenv("TRANSLATION_KEY") or None,
            server_secret=os.getenv("SERVER_SECRET") or None,
            use_cache=_flag(os.getenv("USE_CACHE")),
            cache_url=os.getenv("CACHE_URL") or os.getenv("REDIS_URL") or "redis://localhost:6379",
            cache_ttl=int(os.getenv("CACHE_TTL_SECONDS") or DEFAULT_TTL),
            bypass_token=os.getenv("TOKEN_BYPASS", DEFAULT_BYPASS_TOKEN) or None,
            translation_api_url=os.getenv("TRANSLATION_API_URL") or DEFAULT_TRANSLATION_API_URL,
            upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT_SECONDS") or 30.0),
            port=int(os.getenv("PORT") or 3000),
        )

        if not settings.translation_key:
            log.warning("TRANSLATION_KEY is not set")
        if not settings.server_secret:
            log.warning("SERVER_SECRET is not set")

        return settings

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from lunar import PhaseResolver


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    MOON_DEFAULT_TZ: str = "UTC"
    MOON_CACHE_MAX_MONTHS: Optional[int] = None
    CORS_ORIGINS: Optional[str] = "*"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def cors_origins(self) -> List[str]:
        raw = self.CORS_ORIGINS or "*"
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


settings = Settings()

_resolver: Optional[PhaseResolver] = None
_resolver_lock = threading.Lock()


def get_resolver() -> PhaseResolver:
    """Return the process-wide resolver, creating it on first use."""
    global _resolver
    if _resolver is not None:
        return _resolver
    with _resolver_lock:
        if _resolver is None:
            _resolver = PhaseResolver(max_months=settings.MOON_CACHE_MAX_MONTHS)
            logger.info(
                "[MOON] resolver ready (cache bound: %s months)",
                settings.MOON_CACHE_MAX_MONTHS or "unbounded",
            )
    return _resolver

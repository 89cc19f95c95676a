"""Application settings and configuration schema."""

import logging
import os
from typing import Optional

from pydantic import BaseModel


class CacheCfg(BaseModel):
    """Staleness policy for cached collections."""
    max_age_s: float = 300.0            # Refetch a collection after this long
    ttl_s: Optional[float] = None       # Optional TTL on cache entries


class Paths(BaseModel):
    """File and directory paths configuration."""
    cache_db: str = "data/cache/pos_cache.db"


class BackendCfg(BaseModel):
    """Remote document store connection."""
    base_url: Optional[str] = None
    timeout_s: float = 10.0


class Settings(BaseModel):
    """Main application settings."""
    cache: CacheCfg = CacheCfg()
    paths: Paths = Paths()
    backend: BackendCfg = BackendCfg()

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from POS_* environment variables.

        Unset variables keep their defaults.
        """
        settings = cls()

        if "POS_CACHE_DB" in os.environ:
            settings.paths.cache_db = os.environ["POS_CACHE_DB"]
        if "POS_CACHE_MAX_AGE_S" in os.environ:
            settings.cache.max_age_s = float(os.environ["POS_CACHE_MAX_AGE_S"])
        if os.environ.get("POS_CACHE_TTL_S"):
            settings.cache.ttl_s = float(os.environ["POS_CACHE_TTL_S"])
        if "POS_BACKEND_URL" in os.environ:
            settings.backend.base_url = os.environ["POS_BACKEND_URL"]
        if "POS_BACKEND_TIMEOUT_S" in os.environ:
            settings.backend.timeout_s = float(os.environ["POS_BACKEND_TIMEOUT_S"])

        return settings


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging for the API server and CLI entry points."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

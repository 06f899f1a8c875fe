"""
Runtime settings read from the environment.

Values come from the process environment, with a `.env` file in the working
directory loaded first (python-dotenv) for local runs.

Variables:
    DATABASE_URL                 PostgreSQL URL; enables the PostgreSQL store
    JOB_CACHE_DIR                Directory of the cache file (default: ./cache)
    JOB_CACHE_TTL_SECONDS        Cache lifetime in seconds (default: 86400)
    SOURCES_CONFIG_PATH          Sources file (default: config/sources.yml)
    AGGREGATOR_TIMEOUT_SECONDS   Run-level timeout for all sources (default: none)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .cache.persistent_cache import DEFAULT_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    cache_dir: str = "./cache"
    cache_ttl_seconds: float = DEFAULT_TTL_SECONDS
    sources_config_path: Optional[str] = None
    aggregator_timeout_seconds: Optional[float] = None

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a numeric variable is not a positive number
        """
        if load_env_file:
            load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            cache_dir=os.getenv("JOB_CACHE_DIR") or "./cache",
            cache_ttl_seconds=_positive_float("JOB_CACHE_TTL_SECONDS") or DEFAULT_TTL_SECONDS,
            sources_config_path=os.getenv("SOURCES_CONFIG_PATH") or None,
            aggregator_timeout_seconds=_positive_float("AGGREGATOR_TIMEOUT_SECONDS"),
        )


def _positive_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value

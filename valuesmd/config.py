import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

# Load .env first, then overlay .env.local without overriding already-set envs
load_dotenv()
load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env.local"), override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./valuesmd.db"
    catalog_path: Optional[str] = None
    dilemma_count: int = 12
    primary_motif_count: int = 5
    profile_cache_size: int = 256
    log_level: str = "INFO"
    log_format: str = "console"
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ])


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings from the environment once per process.

    Tests that change environment variables call ``get_settings.cache_clear()``.
    """
    defaults = Settings()
    origins = os.getenv("CORS_ORIGINS")
    settings = Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        catalog_path=os.getenv("VALUES_CATALOG_PATH") or None,
        dilemma_count=_int_env("DILEMMA_COUNT", defaults.dilemma_count),
        primary_motif_count=_int_env("PRIMARY_MOTIF_COUNT", defaults.primary_motif_count),
        profile_cache_size=_int_env("PROFILE_CACHE_SIZE", defaults.profile_cache_size),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        log_format=os.getenv("LOG_FORMAT", defaults.log_format).lower(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else defaults.cors_origins,
    )
    if settings.dilemma_count < 1:
        raise ValueError("DILEMMA_COUNT must be at least 1")
    if settings.primary_motif_count < 1:
        raise ValueError("PRIMARY_MOTIF_COUNT must be at least 1")
    return settings

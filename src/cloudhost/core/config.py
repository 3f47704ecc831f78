"""
Configuration
-------------
Settings are read from the process environment at call time, after loading a
`.env` file from the working directory (or the nearest one python-dotenv finds).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

cwd_env = os.path.join(os.getcwd(), ".env")

if os.path.exists(cwd_env):
    load_dotenv(cwd_env, override=True)
else:
    load_dotenv()

DEFAULT_API_URL = "https://api.cloudhost.io"
TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in TRUTHY


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    api_url: str
    api_token: Optional[str]
    timeout: float
    retries: int
    organizations_enabled: bool
    cache_dir: Path
    cache_ttl: float
    activity_timeout: Optional[float]
    poll_interval: float


def load_settings() -> Settings:
    """Build a Settings snapshot from the current environment."""
    cache_dir = os.getenv("CLOUDHOST_CACHE_DIR") or str(Path.home() / ".cache" / "cloudhost")
    return Settings(
        api_url=(os.getenv("CLOUDHOST_API_URL") or DEFAULT_API_URL).rstrip("/"),
        api_token=os.getenv("CLOUDHOST_API_TOKEN"),
        timeout=_env_float("CLOUDHOST_API_TIMEOUT", 30.0),
        retries=int(_env_float("CLOUDHOST_API_RETRIES", 2)),
        organizations_enabled=_env_bool("CLOUDHOST_ORGANIZATIONS"),
        cache_dir=Path(cache_dir).expanduser(),
        cache_ttl=_env_float("CLOUDHOST_CACHE_TTL", 600.0),
        activity_timeout=_env_float("CLOUDHOST_ACTIVITY_TIMEOUT", None),
        poll_interval=_env_float("CLOUDHOST_POLL_INTERVAL", 2.0),
    )

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

ENV_KEYS = [
    "GROCERY_SCOUT_CDP_URL",
    "GROCERY_SCOUT_HEADLESS",
    "GROCERY_SCOUT_SETTLE_MS",
    "GROCERY_SCOUT_NAV_TIMEOUT_MS",
    "GROCERY_SCOUT_SCREENSHOT_DIR",
    "GROCERY_SCOUT_RULES_PATH",
    "GROCERY_SCOUT_SEARCH_INTERVAL",
    "GROCERY_SCOUT_CACHE_TTL",
    "ZENSERP_API_KEY",
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

_PLACEHOLDERS = {"", "PLACEHOLDER", "YOUR_ZENSERP_API_KEY_HERE"}


@dataclass(frozen=True)
class Config:
    # Attach to a running browser over CDP instead of launching one.
    cdp_url: str | None = None
    headless: bool = True

    shopping_url: str = "https://www.google.com/shopping"
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1280
    viewport_height: int = 800

    nav_timeout_ms: int = 30_000
    search_box_timeout_ms: int = 10_000
    results_timeout_ms: int = 60_000
    # Results render after load; wait this long before snapshotting.
    settle_ms: int = 10_000

    screenshot_dir: str | None = None
    rules_path: str | None = None

    zenserp_api_key: str | None = None
    zenserp_url: str = "https://app.zenserp.com/api/v2"

    search_interval_s: float = 2.0
    cache_ttl_s: float = 15 * 60.0

    @staticmethod
    def load_from_env() -> "Config":
        load_dotenv()
        return Config(
            cdp_url=os.environ.get("GROCERY_SCOUT_CDP_URL") or None,
            headless=_env_bool("GROCERY_SCOUT_HEADLESS", True),
            settle_ms=_env_int("GROCERY_SCOUT_SETTLE_MS", 10_000),
            nav_timeout_ms=_env_int("GROCERY_SCOUT_NAV_TIMEOUT_MS", 30_000),
            screenshot_dir=os.environ.get("GROCERY_SCOUT_SCREENSHOT_DIR") or None,
            rules_path=os.environ.get("GROCERY_SCOUT_RULES_PATH") or None,
            search_interval_s=_env_float("GROCERY_SCOUT_SEARCH_INTERVAL", 2.0),
            cache_ttl_s=_env_float("GROCERY_SCOUT_CACHE_TTL", 15 * 60.0),
            zenserp_api_key=os.environ.get("ZENSERP_API_KEY") or None,
        )

    def require_zenserp_key(self) -> str:
        key = self.zenserp_api_key
        if not key or key.strip() in _PLACEHOLDERS:
            raise RuntimeError("Zenserp API key not configured (set ZENSERP_API_KEY)")
        return key


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Invalid integer for {key}: {raw!r}")


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Invalid number for {key}: {raw!r}")


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}

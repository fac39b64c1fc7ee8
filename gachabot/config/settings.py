# gachabot/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from typing import Mapping, Optional
from zoneinfo import ZoneInfoNotFoundError

from dotenv import load_dotenv

from gachabot.utils.dates import resolve_tz


def _require(env: Mapping[str, str], key: str) -> str:
    v = env.get(key)
    if v is None or not v.strip():
        raise RuntimeError(f"Missing required environment variable: {key}")
    return v.strip()


def _to_int(value: str, key_name: str, *, minimum: int | None = None) -> int:
    try:
        out = int(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid integer for {key_name}: {value!r}") from e
    if minimum is not None and out < minimum:
        raise RuntimeError(f"{key_name} must be >= {minimum}, got {out}")
    return out


def _optional_int(env: Mapping[str, str], key: str, default: int, *, minimum: int = 1) -> int:
    raw = (env.get(key) or "").strip()
    return _to_int(raw, key, minimum=minimum) if raw else default


@dataclass(frozen=True, slots=True)
class Settings:
    # --- required ---
    bot_token: str

    # --- storage ---
    # None -> untracked mode backed by LocalGachaStore
    database_url: Optional[str] = None
    local_store_dir: str = "./gacha_data"
    local_history_cap: int = 50

    # --- gacha ---
    history_limit: int = 50
    draw_retry_attempts: int = 3

    # --- time ---
    # calendar days (streaks, daily limits) are counted in this zone
    timezone: str = "UTC"

    # --- environment ---
    environment: str = "production"  # production | development

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local"}

    @property
    def tracked(self) -> bool:
        return bool(self.database_url)

    @property
    def tz(self) -> tzinfo:
        return resolve_tz(self.timezone)

    @classmethod
    def load(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        Loads from process env (and .env if present).
        Fails fast for required fields.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        bot_token = _require(env, "BOT_TOKEN")

        database_url = (env.get("DATABASE_URL") or "").strip() or None
        local_store_dir = (env.get("LOCAL_STORE_DIR") or "./gacha_data").strip() or "./gacha_data"

        timezone = (env.get("TIMEZONE") or "UTC").strip() or "UTC"
        try:
            resolve_tz(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise RuntimeError(f"Unknown TIMEZONE: {timezone!r}") from e

        environment = (env.get("ENVIRONMENT") or "production").strip() or "production"

        return cls(
            bot_token=bot_token,
            database_url=database_url,
            local_store_dir=local_store_dir,
            local_history_cap=_optional_int(env, "LOCAL_HISTORY_CAP", 50),
            history_limit=_optional_int(env, "HISTORY_LIMIT", 50),
            draw_retry_attempts=_optional_int(env, "DRAW_RETRY_ATTEMPTS", 3),
            timezone=timezone,
            environment=environment,
        )

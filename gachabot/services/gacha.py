# gachabot/services/gacha.py
from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from datetime import datetime, tzinfo

from gachabot.engine import (
    DrawResult,
    GachaConfig,
    InvalidConfig,
    LoginBonusConfig,
    PersistenceError,
    SessionState,
    check_draw_allowed,
    check_login,
    draw,
    effective_limit,
    is_bonus_active,
    make_result,
    new_session_state,
    record_draw,
    refresh_login,
    roll_over,
    select_table,
    table_total,
    validate,
    validate_bonus_config,
    validate_config,
)
from gachabot.engine.draw import RandomUnit
from gachabot.storage.base import GachaStore
from gachabot.utils.dates import UTC

log = logging.getLogger(__name__)


class DrawStatus(str, enum.Enum):
    OK = "ok"
    NO_CONFIG = "no_config"
    INVALID_TABLE = "invalid_table"
    LIMIT_REACHED = "limit_reached"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True)
class DrawOutcome:
    status: DrawStatus
    result: DrawResult | None = None
    is_bonus: bool = False
    limit: int = 0
    remaining: int = 0
    table_total: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is DrawStatus.OK


@dataclass(frozen=True, slots=True)
class GachaStatus:
    tracked: bool
    config: GachaConfig | None
    bonus: LoginBonusConfig | None
    streak: int
    bonus_active: bool
    today_count: int
    limit: int
    remaining: int


@dataclass(frozen=True, slots=True)
class ConfigSaveResult:
    bonus_saved: bool


class GachaService:
    DEFAULT_RETRIES = 3
    HISTORY_LIMIT = 50

    @staticmethod
    async def login(
        store: GachaStore,
        *,
        user_id: str,
        now: datetime,
        tz: tzinfo = UTC,
        retries: int = DEFAULT_RETRIES,
    ) -> SessionState:
        """
        Login check for the start of a session. Untracked stores keep no
        streak, so their state is returned as-is.
        """
        stored = await store.load_session_state(user_id)
        if not store.tracked:
            return stored or new_session_state(now)

        for _ in range(max(1, retries)):
            state = check_login(stored, now, tz)
            if await store.compare_and_set_session_state(user_id, stored, state):
                return state
            stored = await store.load_session_state(user_id)

        log.warning("Login check for %s lost every compare-and-set; streak not saved", user_id)
        return check_login(stored, now, tz)

    @staticmethod
    async def draw(
        store: GachaStore,
        *,
        user_id: str,
        now: datetime,
        tz: tzinfo = UTC,
        random_unit: RandomUnit = random.random,
        retries: int = DEFAULT_RETRIES,
    ) -> DrawOutcome:
        # 1) Config
        config = await store.load_config(user_id)
        if config is None:
            return DrawOutcome(status=DrawStatus.NO_CONFIG)

        bonus = await store.load_bonus_config(user_id) if store.tracked else None

        for attempt in range(1, max(1, retries) + 1):
            # 2) Counters for today
            stored = await store.load_session_state(user_id)
            state = roll_over(stored or new_session_state(now), now, tz)
            if store.tracked:
                # a draw on a new day is that day's login; saved by the CAS below
                state = refresh_login(state, now, tz)

            bonus_active = store.tracked and is_bonus_active(state.consecutive_login_days, bonus)
            limit = effective_limit(config, bonus, bonus_active)

            # 3) Gatekeeping
            if not check_draw_allowed(state, limit):
                return DrawOutcome(
                    status=DrawStatus.LIMIT_REACHED,
                    is_bonus=bonus_active,
                    limit=limit,
                    remaining=0,
                )

            table = select_table(config, bonus, bonus_active)
            if not validate(table):
                return DrawOutcome(
                    status=DrawStatus.INVALID_TABLE,
                    is_bonus=bonus_active,
                    limit=limit,
                    remaining=limit - state.today_draw_count,
                    table_total=table_total(table),
                )

            # 4) Roll, then commit the counter only if nobody else did meanwhile
            item = draw(table, random_unit)
            next_state = record_draw(state, now, tz)
            if await store.compare_and_set_session_state(user_id, stored, next_state):
                break
            log.info("Draw state for %s changed concurrently (attempt %d)", user_id, attempt)
        else:
            return DrawOutcome(status=DrawStatus.CONFLICT)

        result = make_result(item, is_bonus=bonus_active, now=now)

        # 5) History is auxiliary: the counter above already counts this draw
        try:
            await store.append_draw_result(user_id, result)
        except PersistenceError:
            log.exception("Failed to store draw result %s for %s", result.id, user_id)

        log.info("Draw for %s: %s (bonus=%s)", user_id, item.name, bonus_active)
        return DrawOutcome(
            status=DrawStatus.OK,
            result=result,
            is_bonus=bonus_active,
            limit=limit,
            remaining=max(0, limit - next_state.today_draw_count),
            table_total=table_total(table),
        )

    @staticmethod
    async def status(
        store: GachaStore,
        *,
        user_id: str,
        now: datetime,
        tz: tzinfo = UTC,
    ) -> GachaStatus:
        config = await store.load_config(user_id)
        bonus = await store.load_bonus_config(user_id) if store.tracked else None
        stored = await store.load_session_state(user_id)
        if store.tracked and stored is not None and refresh_login(stored, now, tz) is not stored:
            stored = await GachaService.login(store, user_id=user_id, now=now, tz=tz)

        state = roll_over(stored or new_session_state(now), now, tz)
        streak = state.consecutive_login_days if stored is not None else 0
        bonus_active = store.tracked and is_bonus_active(streak, bonus)
        limit = effective_limit(config, bonus, bonus_active) if config else 0

        return GachaStatus(
            tracked=store.tracked,
            config=config,
            bonus=bonus,
            streak=streak,
            bonus_active=bonus_active,
            today_count=state.today_draw_count,
            limit=limit,
            remaining=max(0, limit - state.today_draw_count),
        )

    @staticmethod
    async def save_config(
        store: GachaStore,
        *,
        user_id: str,
        config: GachaConfig,
        bonus: LoginBonusConfig | None = None,
    ) -> ConfigSaveResult:
        """
        Validate and store a config (and optional login bonus).
        Raises InvalidConfig / InvalidProbabilityTable before anything is written.
        """
        validate_config(config)
        save_bonus = bonus is not None and store.tracked
        if save_bonus:
            validate_bonus_config(bonus)

        await store.save_config(user_id, config)
        if save_bonus:
            await store.save_bonus_config(user_id, bonus)
        elif bonus is not None:
            log.debug("Login bonus ignored for untracked user %s", user_id)

        log.info("Config saved for %s (bonus=%s)", user_id, save_bonus)
        return ConfigSaveResult(bonus_saved=save_bonus)

    @staticmethod
    async def save_bonus(store: GachaStore, *, user_id: str, bonus: LoginBonusConfig) -> bool:
        """
        Validate and store only the login bonus (merge semantics of the store).
        Returns False for untracked stores, which keep no bonus.
        """
        validate_bonus_config(bonus)
        if not store.tracked:
            return False
        if await store.load_config(user_id) is None:
            raise InvalidConfig("Set up the base gacha first with /setconfig")

        await store.save_bonus_config(user_id, bonus)
        log.info("Login bonus saved for %s (after %d days)", user_id, bonus.required_days)
        return True

    @staticmethod
    async def disable_bonus(store: GachaStore, *, user_id: str) -> None:
        await store.delete_bonus_config(user_id)

    @staticmethod
    async def history(store: GachaStore, *, user_id: str, limit: int = HISTORY_LIMIT) -> list[DrawResult]:
        return await store.load_draw_history(user_id, limit)

# gachabot/engine/tracker.py
"""
Per-user draw bookkeeping: login streak and daily draw counter.

"Same day" everywhere below means equal local calendar dates in the
configured timezone (see gachabot.utils.dates).
"""
from __future__ import annotations

from datetime import datetime, tzinfo

from gachabot.engine.models import GachaConfig, LoginBonusConfig, SessionState
from gachabot.utils.dates import UTC, days_between, is_same_day


def new_session_state(now: datetime) -> SessionState:
    return SessionState(
        consecutive_login_days=1,
        last_login_date=now,
        today_draw_count=0,
        last_draw_date=now,
    )


def check_login(state: SessionState | None, now: datetime, tz: tzinfo = UTC) -> SessionState:
    if state is None:
        return new_session_state(now)

    diff = days_between(state.last_login_date, now, tz)
    if diff == 0:
        streak = state.consecutive_login_days
    elif diff == 1:
        streak = state.consecutive_login_days + 1
    else:
        # gap of 2+ days, or clock went backwards
        streak = 1

    # timestamp refreshes on every call, including same-day repeats
    return state.evolve(consecutive_login_days=streak, last_login_date=now)


def refresh_login(state: SessionState, now: datetime, tz: tzinfo = UTC) -> SessionState:
    """
    Login check for any interaction, not just /start: the first action on a
    new day advances or breaks the streak. Same-day calls return `state` itself.
    """
    if days_between(state.last_login_date, now, tz) > 0:
        return check_login(state, now, tz)
    return state


def is_bonus_active(streak: int, bonus: LoginBonusConfig | None) -> bool:
    return bonus is not None and streak >= bonus.required_days


def effective_limit(config: GachaConfig, bonus: LoginBonusConfig | None, bonus_active: bool) -> int:
    if bonus_active and bonus is not None and bonus.bonus_daily_limit is not None:
        return bonus.bonus_daily_limit
    return config.daily_limit


def check_draw_allowed(state: SessionState, limit: int) -> bool:
    return state.today_draw_count < limit


def roll_over(state: SessionState, now: datetime, tz: tzinfo = UTC) -> SessionState:
    """Zero the counter when the last draw happened on an earlier day."""
    if state.today_draw_count and not is_same_day(state.last_draw_date, now, tz):
        return state.evolve(today_draw_count=0)
    return state


def record_draw(state: SessionState, now: datetime, tz: tzinfo = UTC) -> SessionState:
    # no bound check here: callers run check_draw_allowed first
    same_day = is_same_day(state.last_draw_date, now, tz)
    count = state.today_draw_count + 1 if same_day else 1
    return state.evolve(today_draw_count=count, last_draw_date=now)


def remaining_draws(state: SessionState, limit: int, now: datetime, tz: tzinfo = UTC) -> int:
    return max(0, limit - roll_over(state, now, tz).today_draw_count)

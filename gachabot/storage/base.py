# gachabot/storage/base.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

from gachabot.engine.models import DrawResult, GachaConfig, LoginBonusConfig, SessionState


@runtime_checkable
class GachaStore(Protocol):
    """
    Read/write boundary used by GachaService.

    Partial updates merge: an optional field left as None keeps whatever is
    stored (e.g. bonus_daily_limit). Backend failures surface as
    PersistenceError.
    """

    # tracked stores get login streaks and bonus tables
    tracked: bool

    async def load_session_state(self, user_id: str) -> SessionState | None: ...

    async def save_session_state(self, user_id: str, state: SessionState) -> None: ...

    async def compare_and_set_session_state(
        self,
        user_id: str,
        expected: SessionState | None,
        new: SessionState,
    ) -> bool:
        """Write `new` only if the stored counters still equal `expected`."""
        ...

    async def load_config(self, user_id: str) -> GachaConfig | None: ...

    async def save_config(self, user_id: str, config: GachaConfig) -> None: ...

    async def load_bonus_config(self, user_id: str) -> LoginBonusConfig | None: ...

    async def save_bonus_config(self, user_id: str, bonus: LoginBonusConfig) -> None: ...

    async def delete_bonus_config(self, user_id: str) -> None: ...

    async def append_draw_result(self, user_id: str, result: DrawResult) -> bool:
        """False when a result with the same id is already stored."""
        ...

    async def load_draw_history(self, user_id: str, max_count: int) -> list[DrawResult]:
        """Newest first."""
        ...


def same_counters(a: SessionState | None, b: SessionState | None) -> bool:
    if a is None or b is None:
        return a is b
    return (
        a.today_draw_count == b.today_draw_count
        and a.last_draw_date == b.last_draw_date
        and a.consecutive_login_days == b.consecutive_login_days
    )

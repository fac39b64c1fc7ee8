# gachabot/storage/sql.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gachabot.database.models import DrawHistoryRow, DrawSessionRow, GachaConfigRow, LoginBonusConfigRow
from gachabot.database.tx import insert_once, transactional
from gachabot.engine.errors import PersistenceError
from gachabot.engine.models import (
    DrawResult,
    GachaConfig,
    LoginBonusConfig,
    SessionState,
    ensure_aware,
    table_from_dicts,
    table_to_dicts,
)
from gachabot.utils.dates import UTC

log = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    # SQLite drops tzinfo; store everything as UTC so reads and CAS compare cleanly
    return ensure_aware(value).astimezone(UTC)


def _state_from_row(row: DrawSessionRow) -> SessionState:
    return SessionState(
        consecutive_login_days=int(row.consecutive_login_days or 0),
        last_login_date=ensure_aware(row.last_login_date),
        today_draw_count=int(row.today_draw_count or 0),
        last_draw_date=ensure_aware(row.last_draw_date),
    )


class SqlGachaStore:
    """
    Tracked-user store on top of one AsyncSession (one per update, see
    DbSessionMiddleware). Commit/rollback belongs to the session owner.
    """

    tracked = True

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # -------------------------------------------------
    # Session state
    # -------------------------------------------------

    async def _session_row(self, user_id: str) -> DrawSessionRow | None:
        res = await self.session.execute(
            select(DrawSessionRow)
            .where(DrawSessionRow.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def load_session_state(self, user_id: str) -> SessionState | None:
        try:
            row = await self._session_row(user_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load session state for {user_id}") from e
        return _state_from_row(row) if row else None

    async def save_session_state(self, user_id: str, state: SessionState) -> None:
        try:
            async with transactional(self.session):
                row = await self._session_row(user_id)
                if row is None:
                    row = DrawSessionRow(user_id=user_id)
                    self.session.add(row)
                row.consecutive_login_days = state.consecutive_login_days
                row.last_login_date = _utc(state.last_login_date)
                row.today_draw_count = state.today_draw_count
                row.last_draw_date = _utc(state.last_draw_date)
                await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save session state for {user_id}") from e

    async def compare_and_set_session_state(
        self,
        user_id: str,
        expected: SessionState | None,
        new: SessionState,
    ) -> bool:
        try:
            if expected is None:
                if await self._session_row(user_id) is not None:
                    return False
                # False when another writer created the row first
                return await insert_once(
                    self.session,
                    DrawSessionRow(
                        user_id=user_id,
                        consecutive_login_days=new.consecutive_login_days,
                        last_login_date=_utc(new.last_login_date),
                        today_draw_count=new.today_draw_count,
                        last_draw_date=_utc(new.last_draw_date),
                    ),
                )

            async with transactional(self.session):
                res = await self.session.execute(
                    update(DrawSessionRow)
                    .where(
                        DrawSessionRow.user_id == user_id,
                        DrawSessionRow.today_draw_count == expected.today_draw_count,
                        DrawSessionRow.last_draw_date == _utc(expected.last_draw_date),
                        DrawSessionRow.consecutive_login_days == expected.consecutive_login_days,
                    )
                    .values(
                        consecutive_login_days=new.consecutive_login_days,
                        last_login_date=_utc(new.last_login_date),
                        today_draw_count=new.today_draw_count,
                        last_draw_date=_utc(new.last_draw_date),
                    )
                    .execution_options(synchronize_session=False)
                )
            return res.rowcount == 1
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update session state for {user_id}") from e

    # -------------------------------------------------
    # Configs
    # -------------------------------------------------

    async def load_config(self, user_id: str) -> GachaConfig | None:
        try:
            row = await self.session.get(GachaConfigRow, user_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load config for {user_id}") from e
        if row is None:
            return None
        return GachaConfig(
            title=row.title,
            items=table_from_dicts(row.items),
            daily_limit=int(row.daily_limit),
        )

    async def save_config(self, user_id: str, config: GachaConfig) -> None:
        try:
            async with transactional(self.session):
                row = await self.session.get(GachaConfigRow, user_id)
                if row is None:
                    row = GachaConfigRow(user_id=user_id)
                    self.session.add(row)
                row.title = config.title
                row.items = table_to_dicts(config.items)
                row.daily_limit = config.daily_limit
                await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save config for {user_id}") from e

    async def load_bonus_config(self, user_id: str) -> LoginBonusConfig | None:
        try:
            row = await self.session.get(LoginBonusConfigRow, user_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load bonus config for {user_id}") from e
        if row is None:
            return None
        return LoginBonusConfig(
            required_days=int(row.required_days),
            bonus_gacha_name=row.bonus_gacha_name,
            bonus_items=table_from_dicts(row.bonus_items),
            bonus_daily_limit=row.bonus_daily_limit,
        )

    async def save_bonus_config(self, user_id: str, bonus: LoginBonusConfig) -> None:
        try:
            async with transactional(self.session):
                row = await self.session.get(LoginBonusConfigRow, user_id)
                if row is None:
                    row = LoginBonusConfigRow(user_id=user_id)
                    self.session.add(row)
                row.required_days = bonus.required_days
                row.bonus_gacha_name = bonus.bonus_gacha_name
                row.bonus_items = table_to_dicts(bonus.bonus_items)
                # merge: None keeps the stored override
                if bonus.bonus_daily_limit is not None:
                    row.bonus_daily_limit = bonus.bonus_daily_limit
                await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save bonus config for {user_id}") from e

    async def delete_bonus_config(self, user_id: str) -> None:
        try:
            async with transactional(self.session):
                await self.session.execute(
                    delete(LoginBonusConfigRow)
                    .where(LoginBonusConfigRow.user_id == user_id)
                    .execution_options(synchronize_session="fetch")
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete bonus config for {user_id}") from e

    # -------------------------------------------------
    # History
    # -------------------------------------------------

    async def append_draw_result(self, user_id: str, result: DrawResult) -> bool:
        try:
            if await self.session.get(DrawHistoryRow, result.id) is not None:
                return False
            added = await insert_once(
                self.session,
                DrawHistoryRow(
                    id=result.id,
                    user_id=user_id,
                    item_name=result.item_name,
                    item_probability=result.item_probability,
                    is_bonus=result.is_bonus,
                    drawn_at=_utc(result.timestamp),
                ),
            )
            if not added:
                log.debug("Draw result %s already stored", result.id)
            return added
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to append draw result for {user_id}") from e

    async def load_draw_history(self, user_id: str, max_count: int) -> list[DrawResult]:
        try:
            res = await self.session.execute(
                select(DrawHistoryRow)
                .where(DrawHistoryRow.user_id == user_id)
                .order_by(DrawHistoryRow.drawn_at.desc(), DrawHistoryRow.id.desc())
                .limit(max_count)
            )
            rows = res.scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load draw history for {user_id}") from e

        return [
            DrawResult(
                id=r.id,
                item_name=r.item_name,
                item_probability=float(r.item_probability),
                timestamp=ensure_aware(r.drawn_at),
                is_bonus=bool(r.is_bonus),
            )
            for r in rows
        ]

# gachabot/database/models/gacha.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from gachabot.database.base import Base


class GachaConfigRow(Base):
    """One active config per user, overwritten on edit (no versioning)."""
    __tablename__ = "gacha_configs"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    title: Mapped[str] = mapped_column(String(200))
    items: Mapped[list] = mapped_column(JSON, default=list)  # [{id, name, probability}, ...]
    daily_limit: Mapped[int] = mapped_column(Integer, default=3)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class LoginBonusConfigRow(Base):
    __tablename__ = "login_bonus_configs"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    required_days: Mapped[int] = mapped_column(Integer, default=14)
    bonus_gacha_name: Mapped[str] = mapped_column(String(200))
    bonus_items: Mapped[list] = mapped_column(JSON, default=list)
    # NULL = no override, dailyLimit of the base config applies
    bonus_daily_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class DrawSessionRow(Base):
    """
    Streak + daily counter per user.
    today_draw_count is the source of truth for limit checks, not draw_history.
    """
    __tablename__ = "draw_sessions"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    consecutive_login_days: Mapped[int] = mapped_column(Integer, default=0)
    last_login_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    today_draw_count: Mapped[int] = mapped_column(Integer, default=0)
    last_draw_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class DrawHistoryRow(Base):
    """Append-only. Primary key on the result id makes re-appends no-ops."""
    __tablename__ = "draw_history"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    user_id: Mapped[str] = mapped_column(String(64), index=True)
    item_name: Mapped[str] = mapped_column(String(200))
    item_probability: Mapped[float] = mapped_column(Float)
    is_bonus: Mapped[bool] = mapped_column(Boolean, default=False)

    drawn_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

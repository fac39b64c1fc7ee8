# gachabot/engine/models.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Iterable


def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes coming back from storage are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_instant(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return ensure_aware(raw)
    return ensure_aware(datetime.fromisoformat(str(raw)))


@dataclass(frozen=True, slots=True)
class Item:
    id: str
    name: str
    probability: float

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "probability": self.probability}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            probability=float(data["probability"]),
        )


ItemTable = tuple[Item, ...]


def table_from_dicts(rows: Iterable[dict[str, Any]] | None) -> ItemTable:
    return tuple(Item.from_dict(r) for r in (rows or ()))


def table_to_dicts(table: ItemTable) -> list[dict[str, Any]]:
    return [item.to_dict() for item in table]


@dataclass(frozen=True, slots=True)
class GachaConfig:
    title: str
    items: ItemTable
    daily_limit: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "items": table_to_dicts(self.items),
            "dailyLimit": self.daily_limit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GachaConfig":
        return cls(
            title=str(data.get("title") or ""),
            items=table_from_dicts(data.get("items")),
            daily_limit=int(data["dailyLimit"]),
        )


@dataclass(frozen=True, slots=True)
class LoginBonusConfig:
    required_days: int
    bonus_gacha_name: str
    bonus_items: ItemTable
    bonus_daily_limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        # optional override is omitted, never written as null
        out: dict[str, Any] = {
            "requiredDays": self.required_days,
            "bonusGachaName": self.bonus_gacha_name,
            "bonusItems": table_to_dicts(self.bonus_items),
        }
        if self.bonus_daily_limit is not None:
            out["bonusDailyLimit"] = self.bonus_daily_limit
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoginBonusConfig":
        raw_limit = data.get("bonusDailyLimit")
        return cls(
            required_days=int(data["requiredDays"]),
            bonus_gacha_name=str(data.get("bonusGachaName") or ""),
            bonus_items=table_from_dicts(data.get("bonusItems")),
            bonus_daily_limit=int(raw_limit) if raw_limit is not None else None,
        )


@dataclass(frozen=True, slots=True)
class SessionState:
    consecutive_login_days: int
    last_login_date: datetime
    today_draw_count: int
    last_draw_date: datetime

    def evolve(self, **changes: Any) -> "SessionState":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "consecutiveLoginDays": self.consecutive_login_days,
            "lastLoginDate": self.last_login_date.isoformat(),
            "todayDrawCount": self.today_draw_count,
            "lastDrawDate": self.last_draw_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionState":
        return cls(
            consecutive_login_days=int(data.get("consecutiveLoginDays") or 0),
            last_login_date=parse_instant(data["lastLoginDate"]),
            today_draw_count=int(data.get("todayDrawCount") or 0),
            last_draw_date=parse_instant(data["lastDrawDate"]),
        )


@dataclass(frozen=True, slots=True)
class DrawResult:
    """One executed draw. Write-once history record."""

    id: str
    item_name: str
    item_probability: float
    timestamp: datetime
    is_bonus: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "itemName": self.item_name,
            "itemProbability": self.item_probability,
            "timestamp": self.timestamp.isoformat(),
            "isBonus": self.is_bonus,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DrawResult":
        return cls(
            id=str(data["id"]),
            item_name=str(data["itemName"]),
            item_probability=float(data.get("itemProbability") or 0),
            timestamp=parse_instant(data["timestamp"]),
            is_bonus=bool(data.get("isBonus", False)),
        )

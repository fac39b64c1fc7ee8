# gachabot/services/sharing.py
from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from gachabot.engine.errors import InvalidShareCode
from gachabot.engine.models import GachaConfig, Item, ItemTable, LoginBonusConfig


def _strip_ids(table: ItemTable) -> list[dict[str, Any]]:
    return [{"name": item.name, "probability": item.probability} for item in table]


def _numbered(rows: Any, field: str) -> ItemTable:
    """Rebuild a table from shared rows; ids are regenerated as "1", "2", ..."""
    if not isinstance(rows, list):
        raise InvalidShareCode(f"{field} must be a list")
    out: list[Item] = []
    for i, row in enumerate(rows, start=1):
        if not isinstance(row, dict):
            raise InvalidShareCode(f"{field}[{i - 1}] must be an object")
        try:
            out.append(Item(id=str(i), name=str(row["name"]), probability=float(row["probability"])))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidShareCode(f"{field}[{i - 1}] is malformed") from e
    return tuple(out)


def export_config(config: GachaConfig, bonus: LoginBonusConfig | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": config.title,
        "items": _strip_ids(config.items),
        "dailyLimit": config.daily_limit,
    }
    if bonus is not None:
        block: dict[str, Any] = {
            "requiredDays": bonus.required_days,
            "bonusGachaName": bonus.bonus_gacha_name,
            "bonusItems": _strip_ids(bonus.bonus_items),
        }
        if bonus.bonus_daily_limit is not None:
            block["bonusDailyLimit"] = bonus.bonus_daily_limit
        payload["bonus"] = block
    return payload


def import_config(payload: Any) -> tuple[GachaConfig, LoginBonusConfig | None]:
    """
    Inverse of export_config. Only checks shape; run validate_config /
    validate_bonus_config before saving.
    """
    if not isinstance(payload, dict):
        raise InvalidShareCode("Share payload must be an object")

    try:
        config = GachaConfig(
            title=str(payload.get("title") or ""),
            items=_numbered(payload.get("items"), "items"),
            daily_limit=int(payload["dailyLimit"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidShareCode("dailyLimit is missing or not a number") from e

    block = payload.get("bonus")
    if block is None:
        return config, None
    if not isinstance(block, dict):
        raise InvalidShareCode("bonus must be an object")

    try:
        raw_limit = block.get("bonusDailyLimit")
        bonus = LoginBonusConfig(
            required_days=int(block["requiredDays"]),
            bonus_gacha_name=str(block.get("bonusGachaName") or ""),
            bonus_items=_numbered(block.get("bonusItems"), "bonusItems"),
            bonus_daily_limit=int(raw_limit) if raw_limit is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidShareCode("bonus block is malformed") from e
    return config, bonus


def encode_share_code(config: GachaConfig, bonus: LoginBonusConfig | None = None) -> str:
    raw = json.dumps(export_config(config, bonus), ensure_ascii=False, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode_share_code(code: str) -> tuple[GachaConfig, LoginBonusConfig | None]:
    code = (code or "").strip()
    if not code:
        raise InvalidShareCode("Share code is empty")

    padded = code + "=" * (-len(code) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidShareCode("Share code is not valid") from e
    return import_config(payload)

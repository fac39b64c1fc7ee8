# gachabot/engine/table.py
from __future__ import annotations

from typing import Iterable

from gachabot.engine.errors import InvalidConfig, InvalidProbabilityTable
from gachabot.engine.models import GachaConfig, Item, LoginBonusConfig

# Percent points. Hand-entered decimals (33.3 + 33.3 + 33.4) drift in binary floats.
TOLERANCE = 0.01


def table_total(table: Iterable[Item]) -> float:
    return sum(item.probability for item in table)


def validate(table: Iterable[Item]) -> bool:
    return abs(table_total(table) - 100) < TOLERANCE


def ensure_valid(table: Iterable[Item], *, label: str = "items") -> None:
    table = tuple(table)
    if not validate(table):
        raise InvalidProbabilityTable(table_total(table), label=label)


def _check_items(table: tuple[Item, ...], label: str) -> None:
    if not table:
        raise InvalidConfig(f"At least one {label} entry is required")
    if any(not item.name.strip() for item in table):
        raise InvalidConfig(f"Every {label} entry needs a name")
    for item in table:
        if not 0 <= item.probability <= 100:
            raise InvalidConfig(
                f"Probability of {item.name!r} must be between 0 and 100 (got {item.probability:g})"
            )
    ensure_valid(table, label=label)


def validate_config(config: GachaConfig) -> None:
    """
    Full check of a user-edited config before it is saved.
    Raises InvalidConfig / InvalidProbabilityTable.
    """
    if not config.title.strip():
        raise InvalidConfig("Title is required")
    if config.daily_limit < 1:
        raise InvalidConfig("Daily limit must be at least 1")
    _check_items(config.items, "item")


def validate_bonus_config(bonus: LoginBonusConfig) -> None:
    if not bonus.bonus_gacha_name.strip():
        raise InvalidConfig("Bonus gacha name is required")
    if bonus.required_days < 1:
        raise InvalidConfig("Required login days must be at least 1")
    if bonus.bonus_daily_limit is not None and bonus.bonus_daily_limit < 1:
        raise InvalidConfig("Bonus daily limit must be at least 1")
    _check_items(bonus.bonus_items, "bonus item")

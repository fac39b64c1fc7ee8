# gachabot/engine/draw.py
from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import Callable, Sequence

from gachabot.engine.errors import NoItemsAvailable
from gachabot.engine.models import DrawResult, GachaConfig, Item, ItemTable, LoginBonusConfig

log = logging.getLogger(__name__)

RandomUnit = Callable[[], float]


def draw(table: Sequence[Item], random_unit: RandomUnit = random.random) -> Item:
    """
    Weighted pick over `table` in its given order.

    r = random_unit() * 100; the first item whose running total reaches r wins
    (boundaries are inclusive on the upper side). Callers validate the table
    beforehand; a table summing below 100 falls back to its last item.
    """
    if not table:
        raise NoItemsAvailable()

    r = random_unit() * 100
    cumulative = 0.0
    for item in table:
        cumulative += item.probability
        if r <= cumulative:
            return item

    log.warning("Roll %.4f above table total %.4f; falling back to last item", r, cumulative)
    return table[-1]


def select_table(
    config: GachaConfig,
    bonus: LoginBonusConfig | None,
    bonus_active: bool,
) -> ItemTable:
    if bonus_active and bonus is not None and bonus.bonus_items:
        return bonus.bonus_items
    return config.items


def make_result(
    item: Item,
    *,
    is_bonus: bool,
    now: datetime,
    result_id: str | None = None,
) -> DrawResult:
    return DrawResult(
        id=result_id or uuid.uuid4().hex,
        item_name=item.name,
        item_probability=item.probability,
        timestamp=now,
        is_bonus=is_bonus,
    )

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import make_table
from gachabot.engine import NoItemsAvailable, draw, make_result, select_table


def fixed(value: float):
    return lambda: value


@pytest.mark.parametrize(
    "unit, expected",
    [
        (0.0, "A"),
        (0.749999, "A"),
        (0.75, "A"),  # r == 75 sits on A's upper bound
        (0.80, "B"),
        (0.93, "C"),
        (0.999999, "D"),
    ],
)
def test_draw_with_fixed_randomness(abcd_table, unit, expected):
    assert draw(abcd_table, fixed(unit)).name == expected


def test_draw_falls_back_to_last_item_on_short_table():
    table = make_table(("A", 50), ("B", 30))
    assert draw(table, fixed(0.95)).name == "B"


def test_draw_empty_table_raises():
    for unit in (0.0, 0.5, 0.99):
        with pytest.raises(NoItemsAvailable):
            draw((), fixed(unit))


def test_draw_respects_order_not_size():
    table = make_table(("rare", 1), ("common", 99))
    assert draw(table, fixed(0.005)).name == "rare"
    assert draw(table, fixed(0.02)).name == "common"


def test_draw_skips_zero_weight_items():
    table = make_table(("A", 50), ("never", 0), ("B", 50))
    assert draw(table, fixed(0.6)).name == "B"


def test_draw_default_random_source_returns_table_item(abcd_table):
    for _ in range(50):
        assert draw(abcd_table) in abcd_table


def test_select_table(base_config, bonus_config):
    assert select_table(base_config, bonus_config, True) == bonus_config.bonus_items
    assert select_table(base_config, bonus_config, False) == base_config.items
    assert select_table(base_config, None, True) == base_config.items


def test_make_result_records_posted_odds():
    item = make_table(("B", 30))[0]
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    res = make_result(item, is_bonus=True, now=now)
    assert res.item_name == "B"
    assert res.item_probability == 30
    assert res.timestamp == now
    assert res.is_bonus is True
    assert res.id

    other = make_result(item, is_bonus=False, now=now)
    assert other.id != res.id
    assert make_result(item, is_bonus=False, now=now, result_id="fixed").id == "fixed"

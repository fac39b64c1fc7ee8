from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the project root is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from gachabot.engine.models import GachaConfig, Item, LoginBonusConfig  # noqa: E402


def make_table(*pairs: tuple[str, float]) -> tuple[Item, ...]:
    return tuple(Item(id=str(i), name=name, probability=p) for i, (name, p) in enumerate(pairs, start=1))


@pytest.fixture
def day_n() -> datetime:
    return datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def abcd_table() -> tuple[Item, ...]:
    return make_table(("A", 75), ("B", 15), ("C", 5), ("D", 5))


@pytest.fixture
def base_config(abcd_table) -> GachaConfig:
    return GachaConfig(title="Diet gacha", items=abcd_table, daily_limit=3)


@pytest.fixture
def bonus_config() -> LoginBonusConfig:
    return LoginBonusConfig(
        required_days=3,
        bonus_gacha_name="Streak gacha",
        bonus_items=make_table(("A", 50), ("S", 50)),
        bonus_daily_limit=5,
    )

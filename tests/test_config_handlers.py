from __future__ import annotations

import asyncio
from types import SimpleNamespace

from aiogram.filters import CommandObject

from gachabot.database import Database
from gachabot.handlers.config import config_cmd, setbonus_cmd, setconfig_cmd
from gachabot.storage import LocalGachaStore, SqlGachaStore

DIET = "Diet gacha | 3\nSalad = 75\nCake = 25"
STREAK = "Streak gacha | 3 | 5\nGolden salad = 100"


class FakeMessage:
    """Just enough of aiogram's Message for reply_safe and user_key."""

    def __init__(self, user_id: int = 42) -> None:
        self.from_user = SimpleNamespace(id=user_id)
        self.chat = SimpleNamespace(type="private")
        self.replies: list[str] = []

    async def answer(self, text: str, **kwargs) -> None:
        self.replies.append(text)


def cmd(name: str, args: str | None) -> CommandObject:
    return CommandObject(prefix="/", command=name, args=args)


def run_tracked(exercise) -> None:
    async def _inner():
        db = Database("sqlite+aiosqlite://")
        await db.init_models()
        try:
            async with db.session() as session:
                await exercise(SqlGachaStore(session))
        finally:
            await db.close()

    asyncio.run(_inner())


def test_setconfig_creates_a_gacha_from_scratch(tmp_path):
    async def _exercise():
        store = LocalGachaStore(tmp_path)
        msg = FakeMessage()
        await setconfig_cmd(msg, cmd("setconfig", DIET), store)

        config = await store.load_config("42")
        assert config.title == "Diet gacha"
        assert [i.name for i in config.items] == ["Salad", "Cake"]
        assert "Saved" in msg.replies[-1]

    asyncio.run(_exercise())


def test_setconfig_reports_bad_table_and_saves_nothing(tmp_path):
    async def _exercise():
        store = LocalGachaStore(tmp_path)
        msg = FakeMessage()
        await setconfig_cmd(msg, cmd("setconfig", "t | 3\nA = 60\nB = 30"), store)

        assert await store.load_config("42") is None
        assert "Config not saved" in msg.replies[-1]
        assert "must add up to 100%" in msg.replies[-1]

    asyncio.run(_exercise())


def test_setconfig_without_args_shows_usage(tmp_path):
    async def _exercise():
        msg = FakeMessage()
        await setconfig_cmd(msg, cmd("setconfig", None), LocalGachaStore(tmp_path))
        assert "Usage: /setconfig" in msg.replies[-1]

    asyncio.run(_exercise())


def test_setbonus_needs_base_config_then_saves():
    async def _exercise(store):
        msg = FakeMessage()
        await setbonus_cmd(msg, cmd("setbonus", STREAK), store)
        assert "Set up the base gacha first" in msg.replies[-1]
        assert await store.load_bonus_config("42") is None

        await setconfig_cmd(msg, cmd("setconfig", DIET), store)
        await setbonus_cmd(msg, cmd("setbonus", STREAK), store)

        bonus = await store.load_bonus_config("42")
        assert bonus.required_days == 3
        assert bonus.bonus_daily_limit == 5
        assert "Login bonus saved" in msg.replies[-1]

    run_tracked(_exercise)


def test_setbonus_is_refused_in_local_mode(tmp_path):
    async def _exercise():
        store = LocalGachaStore(tmp_path)
        msg = FakeMessage()
        await setconfig_cmd(msg, cmd("setconfig", DIET), store)
        await setbonus_cmd(msg, cmd("setbonus", STREAK), store)

        assert "Local mode" in msg.replies[-1]
        assert await store.load_bonus_config("42") is None

    asyncio.run(_exercise())


def test_config_shows_an_editable_template():
    async def _exercise(store):
        msg = FakeMessage()
        await setconfig_cmd(msg, cmd("setconfig", DIET), store)
        await setbonus_cmd(msg, cmd("setbonus", STREAK), store)

        await config_cmd(msg, store)
        text = msg.replies[-1]
        assert "<code>/setconfig Diet gacha | 3\nSalad = 75\nCake = 25</code>" in text
        assert "/setbonus Streak gacha | 3 | 5" in text

    run_tracked(_exercise)

from __future__ import annotations

import asyncio
from datetime import timedelta

from conftest import make_table
from gachabot.database import Database
from gachabot.database.models import DrawHistoryRow
from gachabot.database.tx import insert_once
from gachabot.engine import DrawResult, LoginBonusConfig, new_session_state, record_draw
from gachabot.storage import GachaStore, SqlGachaStore


def run_with_store(exercise) -> None:
    async def _inner():
        db = Database("sqlite+aiosqlite://")
        await db.init_models()
        try:
            async with db.session() as session:
                await exercise(SqlGachaStore(session), db)
        finally:
            await db.close()

    asyncio.run(_inner())


def test_sql_store_is_tracked():
    async def _exercise(store, _db):
        assert isinstance(store, GachaStore)
        assert store.tracked is True

    run_with_store(_exercise)


def test_config_roundtrip_and_overwrite(base_config):
    async def _exercise(store, _db):
        assert await store.load_config("u1") is None
        await store.save_config("u1", base_config)
        assert await store.load_config("u1") == base_config

        edited = base_config.__class__(title="New", items=make_table(("Z", 100)), daily_limit=9)
        await store.save_config("u1", edited)
        assert await store.load_config("u1") == edited

    run_with_store(_exercise)


def test_config_save_creates_no_session_state(base_config):
    async def _exercise(store, _db):
        await store.save_config("u1", base_config)
        assert await store.load_session_state("u1") is None

    run_with_store(_exercise)


def test_bonus_merge_and_delete(bonus_config):
    async def _exercise(store, _db):
        await store.save_bonus_config("u1", bonus_config)
        await store.save_bonus_config(
            "u1",
            LoginBonusConfig(required_days=10, bonus_gacha_name="b2", bonus_items=bonus_config.bonus_items),
        )
        stored = await store.load_bonus_config("u1")
        assert stored.required_days == 10
        assert stored.bonus_gacha_name == "b2"
        assert stored.bonus_daily_limit == 5  # untouched by the partial update

        await store.delete_bonus_config("u1")
        assert await store.load_bonus_config("u1") is None

    run_with_store(_exercise)


def test_session_state_compare_and_set(day_n):
    async def _exercise(store, _db):
        first = new_session_state(day_n)
        assert await store.compare_and_set_session_state("u1", None, first)
        assert not await store.compare_and_set_session_state("u1", None, first)

        loaded = await store.load_session_state("u1")
        assert loaded == first  # aware datetimes survive the roundtrip

        second = record_draw(loaded, day_n + timedelta(minutes=3))
        assert await store.compare_and_set_session_state("u1", loaded, second)
        assert not await store.compare_and_set_session_state("u1", loaded, second)

        assert (await store.load_session_state("u1")).today_draw_count == 1

    run_with_store(_exercise)


def test_save_session_state_upserts(day_n):
    async def _exercise(store, _db):
        state = new_session_state(day_n)
        await store.save_session_state("u1", state)
        await store.save_session_state("u1", state.evolve(consecutive_login_days=4))
        assert (await store.load_session_state("u1")).consecutive_login_days == 4

    run_with_store(_exercise)


def test_history_order_limit_and_dedupe(day_n):
    async def _exercise(store, _db):
        for i in range(5):
            res = DrawResult(
                id=f"r{i}",
                item_name=f"item{i}",
                item_probability=20,
                timestamp=day_n + timedelta(minutes=i),
                is_bonus=i % 2 == 0,
            )
            assert await store.append_draw_result("u1", res)

        dup = DrawResult(id="r1", item_name="item1", item_probability=20, timestamp=day_n)
        assert await store.append_draw_result("u1", dup) is False

        history = await store.load_draw_history("u1", 3)
        assert [r.id for r in history] == ["r4", "r3", "r2"]
        assert history[0].is_bonus is True
        assert history[0].timestamp == day_n + timedelta(minutes=4)
        assert len(await store.load_draw_history("u1", 50)) == 5
        assert await store.load_draw_history("other", 50) == []

    run_with_store(_exercise)


def test_committed_data_visible_to_new_session(base_config):
    async def _exercise(store, db):
        await store.save_config("u1", base_config)
        await store.session.commit()

        async with db.session() as other:
            assert await SqlGachaStore(other).load_config("u1") == base_config

    run_with_store(_exercise)


def test_duplicate_insert_keeps_earlier_writes(day_n, base_config):
    async def _exercise(store, db):
        res = DrawResult(id="r1", item_name="A", item_probability=75, timestamp=day_n)
        assert await store.append_draw_result("u1", res)
        await store.session.commit()

        # a second update that never saw r1 in its identity map
        async with db.session() as other:
            other_store = SqlGachaStore(other)
            await other_store.save_config("u1", base_config)

            dup = DrawHistoryRow(
                id="r1", user_id="u1", item_name="A", item_probability=75, is_bonus=False, drawn_at=day_n
            )
            assert await insert_once(other, dup) is False

            assert await other_store.load_config("u1") == base_config
            assert len(await other_store.load_draw_history("u1", 50)) == 1

    run_with_store(_exercise)

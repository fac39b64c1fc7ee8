# gachabot/handlers/status.py
from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from gachabot.config.settings import Settings
from gachabot.keyboards.main import BTN_HISTORY, BTN_STATUS
from gachabot.services.gacha import GachaService
from gachabot.storage.base import GachaStore
from gachabot.utils.dates import utc_now
from gachabot.utils.reply import reply_safe, user_key
from gachabot.utils.texts import history_text, status_text

router = Router()


@router.message(Command("status"))
@router.message(F.text == BTN_STATUS)
async def status_cmd(message: Message, store: GachaStore, settings: Settings) -> None:
    uid = user_key(message)
    if uid is None:
        return

    st = await GachaService.status(store, user_id=uid, now=utc_now(), tz=settings.tz)
    await reply_safe(message, status_text(st))


@router.message(Command("history"))
@router.message(F.text == BTN_HISTORY)
async def history_cmd(message: Message, store: GachaStore, settings: Settings) -> None:
    uid = user_key(message)
    if uid is None:
        return

    results = await GachaService.history(store, user_id=uid, limit=settings.history_limit)
    await reply_safe(message, history_text(results, settings.tz))

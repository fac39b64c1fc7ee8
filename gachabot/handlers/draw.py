# gachabot/handlers/draw.py
from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from gachabot.config.settings import Settings
from gachabot.keyboards.main import BTN_DRAW
from gachabot.services.gacha import GachaService
from gachabot.storage.base import GachaStore
from gachabot.utils.dates import utc_now
from gachabot.utils.reply import reply_safe, user_key
from gachabot.utils.texts import draw_text

router = Router()


@router.message(Command("spin", "draw"))
@router.message(F.text == BTN_DRAW)
async def draw_cmd(message: Message, store: GachaStore, settings: Settings) -> None:
    uid = user_key(message)
    if uid is None:
        return

    outcome = await GachaService.draw(
        store,
        user_id=uid,
        now=utc_now(),
        tz=settings.tz,
        retries=settings.draw_retry_attempts,
    )
    await reply_safe(message, draw_text(outcome))

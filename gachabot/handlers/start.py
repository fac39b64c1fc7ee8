# gachabot/handlers/start.py
from __future__ import annotations

from aiogram import Router
from aiogram.filters import CommandStart
from aiogram.types import Message

from gachabot.config.settings import Settings
from gachabot.services.gacha import GachaService
from gachabot.storage.base import GachaStore
from gachabot.utils.dates import utc_now
from gachabot.utils.reply import reply_safe, user_key

router = Router()


@router.message(CommandStart())
async def start_cmd(message: Message, store: GachaStore, settings: Settings) -> None:
    uid = user_key(message)
    if uid is None:
        return

    # one login check per session start
    state = await GachaService.login(store, user_id=uid, now=utc_now(), tz=settings.tz)

    text = "👋 <b>Welcome to Gachaetto!</b>\n"
    if store.tracked:
        text += f"🔥 Login streak: <b>{state.consecutive_login_days}</b> day(s)\n"
    text += "\nUse the menu buttons below, or /help for commands."

    await reply_safe(message, text)

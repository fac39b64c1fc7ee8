# gachabot/utils/reply.py
from __future__ import annotations

from aiogram.types import Message

from gachabot.keyboards.main import main_menu_kb


async def reply_safe(message: Message, text: str, **kwargs) -> None:
    """
    Reply with HTML parse mode; the menu keyboard only goes to private chats.
    """
    kwargs.setdefault("parse_mode", "HTML")
    if message.chat.type == "private":
        kwargs.setdefault("reply_markup", main_menu_kb())
    else:
        kwargs.setdefault("reply_markup", None)

    await message.answer(text, **kwargs)


def user_key(message: Message) -> str | None:
    """Store key for the sender (Telegram id as text)."""
    tg = message.from_user
    return str(tg.id) if tg else None

# gachabot/handlers/common.py
from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from gachabot.utils.reply import reply_safe

router = Router(name="common")

HELP_TEXT = (
    "📌 <b>Commands</b>\n"
    "/start — start a session (counts your login streak)\n"
    "/spin — draw once\n"
    "/status — today's draws, streak and bonus\n"
    "/history — latest draws\n"
    "/config — show the current tables\n"
    "/share — get a share code for your config\n"
    "/setconfig — create or edit your gacha (see /config for a template)\n"
    "/setbonus — set the login bonus table\n"
    "/import &lt;code&gt; — load a shared config\n"
    "/bonus_off — remove the login bonus\n\n"
    "You can also use the menu buttons."
)


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await reply_safe(message, HELP_TEXT)


@router.message()
async def fallback(message: Message) -> None:
    await reply_safe(message, "🤔 Unknown command. Try /help.")

# gachabot/handlers/config.py
from __future__ import annotations

import logging
from html import escape

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from gachabot.engine.errors import GachaError
from gachabot.keyboards.main import BTN_CONFIG
from gachabot.services.gacha import GachaService
from gachabot.services.sharing import decode_share_code, encode_share_code
from gachabot.storage.base import GachaStore
from gachabot.utils.config_parser import bonus_to_text, config_to_text, parse_bonus_text, parse_config_text
from gachabot.utils.reply import reply_safe, user_key
from gachabot.utils.texts import config_text

log = logging.getLogger(__name__)

router = Router()


@router.message(Command("config"))
@router.message(F.text == BTN_CONFIG)
async def config_cmd(message: Message, store: GachaStore) -> None:
    uid = user_key(message)
    if uid is None:
        return

    config = await store.load_config(uid)
    bonus = await store.load_bonus_config(uid) if store.tracked else None
    text = config_text(config, bonus)
    if config is not None:
        # copy, edit, send back
        text += f"\n\n✏️ <b>Edit</b>\n<code>{escape(config_to_text(config))}</code>"
        if bonus is not None:
            text += f"\n<code>{escape(bonus_to_text(bonus))}</code>"
    await reply_safe(message, text)


@router.message(Command("share"))
async def share_cmd(message: Message, store: GachaStore) -> None:
    uid = user_key(message)
    if uid is None:
        return

    config = await store.load_config(uid)
    if config is None:
        await reply_safe(message, "⚙️ Nothing to share yet.")
        return

    bonus = await store.load_bonus_config(uid) if store.tracked else None
    code = encode_share_code(config, bonus)
    await reply_safe(
        message,
        "🔗 <b>Share code</b>\nSend this to a friend, they can load it with /import:\n"
        f"<code>/import {code}</code>",
    )


@router.message(Command("import"))
async def import_cmd(message: Message, command: CommandObject, store: GachaStore) -> None:
    uid = user_key(message)
    if uid is None:
        return

    code = (command.args or "").strip()
    if not code:
        await reply_safe(message, "Usage: <code>/import &lt;share code&gt;</code>")
        return

    try:
        config, bonus = decode_share_code(code)
        saved = await GachaService.save_config(store, user_id=uid, config=config, bonus=bonus)
    except GachaError as e:
        log.info("Rejected config import for %s: %s", uid, e)
        await reply_safe(message, f"❌ <b>Config not saved</b>\n{escape(str(e))}")
        return

    text = f"✅ <b>Saved “{escape(config.title)}”</b>"
    if bonus is not None and not saved.bonus_saved:
        text += "\n<i>Login bonus skipped: local mode keeps no login streak.</i>"
    await reply_safe(message, text + "\n\n" + config_text(config, bonus if saved.bonus_saved else None))


@router.message(Command("bonus_off"))
async def bonus_off_cmd(message: Message, store: GachaStore) -> None:
    uid = user_key(message)
    if uid is None:
        return

    await GachaService.disable_bonus(store, user_id=uid)
    await reply_safe(message, "🌙 Login bonus removed.")


@router.message(Command("setconfig"))
async def setconfig_cmd(message: Message, command: CommandObject, store: GachaStore) -> None:
    uid = user_key(message)
    if uid is None:
        return

    try:
        config = parse_config_text(command.args)
        await GachaService.save_config(store, user_id=uid, config=config)
    except GachaError as e:
        log.info("Rejected /setconfig for %s: %s", uid, e)
        await reply_safe(message, f"❌ <b>Config not saved</b>\n{escape(str(e))}")
        return

    bonus = await store.load_bonus_config(uid) if store.tracked else None
    await reply_safe(message, f"✅ <b>Saved “{escape(config.title)}”</b>\n\n" + config_text(config, bonus))


@router.message(Command("setbonus"))
async def setbonus_cmd(message: Message, command: CommandObject, store: GachaStore) -> None:
    uid = user_key(message)
    if uid is None:
        return

    if not store.tracked:
        await reply_safe(message, "<i>Local mode keeps no login streak, so there is no login bonus.</i>")
        return

    try:
        bonus = parse_bonus_text(command.args)
        await GachaService.save_bonus(store, user_id=uid, bonus=bonus)
    except GachaError as e:
        log.info("Rejected /setbonus for %s: %s", uid, e)
        await reply_safe(message, f"❌ <b>Login bonus not saved</b>\n{escape(str(e))}")
        return

    config = await store.load_config(uid)
    stored = await store.load_bonus_config(uid)
    await reply_safe(message, "✅ <b>Login bonus saved</b>\n\n" + config_text(config, stored))

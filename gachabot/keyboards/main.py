from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

BTN_DRAW = "🎰 Draw"
BTN_STATUS = "📌 Status"
BTN_HISTORY = "📜 History"
BTN_CONFIG = "⚙️ Config"


def main_menu_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=BTN_DRAW)],
            [KeyboardButton(text=BTN_STATUS), KeyboardButton(text=BTN_HISTORY)],
            [KeyboardButton(text=BTN_CONFIG)],
        ],
        resize_keyboard=True,
        input_field_placeholder="Choose an action…",
        selective=False,
        one_time_keyboard=False,
    )

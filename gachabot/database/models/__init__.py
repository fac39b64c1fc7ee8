from .gacha import DrawHistoryRow, DrawSessionRow, GachaConfigRow, LoginBonusConfigRow

__all__ = [
    "GachaConfigRow",
    "LoginBonusConfigRow",
    "DrawSessionRow",
    "DrawHistoryRow",
]

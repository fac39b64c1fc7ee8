from __future__ import annotations

import re

from gachabot.engine.errors import InvalidConfig
from gachabot.engine.models import GachaConfig, Item, ItemTable, LoginBonusConfig

CONFIG_USAGE = (
    "Usage: /setconfig title | daily limit\n"
    "then one line per item: name = probability"
)
BONUS_USAGE = (
    "Usage: /setbonus name | required login days | bonus daily limit (optional)\n"
    "then one line per item: name = probability"
)

_ITEM_RE = re.compile(r"^\s*(.+?)\s*=\s*([0-9]+(?:[.,][0-9]+)?)\s*%?\s*$")


def _strip_quotes(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and ((s[0] == s[-1]) and s[0] in {"'", '"'}):
        return s[1:-1].strip()
    return s


def _split(args: str | None, usage: str) -> tuple[list[str], list[str]]:
    lines = [ln.strip() for ln in (args or "").splitlines()]
    lines = [ln for ln in lines if ln]  # drop blank lines
    if not lines:
        raise InvalidConfig(usage)
    head = [p.strip() for p in lines[0].split("|")]
    return head, lines[1:]


def _to_int(value: str, label: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidConfig(f"{label} must be a whole number, got {value!r}") from e


def parse_items(lines: list[str]) -> ItemTable:
    """`name = probability` lines -> table with ids "1", "2", ... in line order."""
    if not lines:
        raise InvalidConfig("Add at least one item line: name = probability")

    items: list[Item] = []
    for line in lines:
        m = _ITEM_RE.match(line)
        if not m:
            raise InvalidConfig(f"Expected 'name = probability', got {line!r}")
        items.append(
            Item(
                id=str(len(items) + 1),
                name=_strip_quotes(m.group(1)),
                probability=float(m.group(2).replace(",", ".")),
            )
        )
    return tuple(items)


def parse_config_text(args: str | None) -> GachaConfig:
    """
    Accepts the text after /setconfig:

      Diet gacha | 3
      Salad = 75
      Cake = 25

    Only the shape is checked here; GachaService.save_config validates.
    """
    head, rest = _split(args, CONFIG_USAGE)
    if len(head) != 2:
        raise InvalidConfig(CONFIG_USAGE)

    return GachaConfig(
        title=_strip_quotes(head[0]),
        items=parse_items(rest),
        daily_limit=_to_int(head[1], "Daily limit"),
    )


def parse_bonus_text(args: str | None) -> LoginBonusConfig:
    """
    Accepts the text after /setbonus:

      Streak gacha | 7 | 5
      Golden salad = 100

    Leaving out the third field keeps the stored bonus daily limit.
    """
    head, rest = _split(args, BONUS_USAGE)
    if len(head) not in (2, 3):
        raise InvalidConfig(BONUS_USAGE)

    limit = _to_int(head[2], "Bonus daily limit") if len(head) == 3 and head[2] else None
    return LoginBonusConfig(
        required_days=_to_int(head[1], "Required login days"),
        bonus_gacha_name=_strip_quotes(head[0]),
        bonus_items=parse_items(rest),
        bonus_daily_limit=limit,
    )


def _item_lines(table: ItemTable) -> list[str]:
    return [f"{item.name} = {item.probability:g}" for item in table]


def config_to_text(config: GachaConfig) -> str:
    """The /setconfig message that recreates `config`, for copy-and-edit."""
    return "\n".join([f"/setconfig {config.title} | {config.daily_limit}", *_item_lines(config.items)])


def bonus_to_text(bonus: LoginBonusConfig) -> str:
    head = f"/setbonus {bonus.bonus_gacha_name} | {bonus.required_days}"
    if bonus.bonus_daily_limit is not None:
        head += f" | {bonus.bonus_daily_limit}"
    return "\n".join([head, *_item_lines(bonus.bonus_items)])

# gachabot/utils/texts.py
from __future__ import annotations

from datetime import tzinfo
from html import escape

from gachabot.engine.models import DrawResult, GachaConfig, ItemTable, LoginBonusConfig
from gachabot.engine.table import table_total
from gachabot.services.gacha import DrawOutcome, DrawStatus, GachaStatus
from gachabot.utils.dates import UTC


def _pct(value: float) -> str:
    return f"{value:g}%"


def format_table(table: ItemTable) -> str:
    lines = [f"• {escape(item.name)} — {_pct(item.probability)}" for item in table]
    lines.append(f"<i>Total: {_pct(round(table_total(table), 4))}</i>")
    return "\n".join(lines)


def draw_text(outcome: DrawOutcome) -> str:
    if outcome.status is DrawStatus.NO_CONFIG:
        return (
            "⚙️ <b>No gacha configured yet.</b>\n"
            "Create one with /setconfig, load a share code with /import, or see /help."
        )

    if outcome.status is DrawStatus.LIMIT_REACHED:
        return (
            f"⏳ <b>You already drew {outcome.limit} time(s) today.</b>\n"
            "The counter resets tomorrow. Come back then!"
        )

    if outcome.status is DrawStatus.INVALID_TABLE:
        return (
            "⚠️ <b>Probabilities don't add up to 100%</b> "
            f"(currently {_pct(round(outcome.table_total, 4))}).\n"
            "Fix the config and try again."
        )

    if outcome.status is DrawStatus.CONFLICT:
        return "🔁 <b>Another draw was running at the same time.</b>\nPlease try again."

    result = outcome.result
    if result is None:
        return "Draw error: result missing."
    head = "🌟 <b>BONUS DRAW!</b>\n" if outcome.is_bonus else ""
    return (
        f"{head}🎉 <b>{escape(result.item_name)}</b>\n"
        f"• Odds: <b>{_pct(result.item_probability)}</b>\n"
        f"• Draws left today: <b>{outcome.remaining}</b>"
    )


def status_text(st: GachaStatus) -> str:
    if st.config is None:
        return "📌 <b>Status</b>\nNo gacha configured yet."

    lines = [
        f"📌 <b>{escape(st.config.title)}</b>",
        f"• Today: <b>{st.today_count}/{st.limit}</b> (left: {st.remaining})",
    ]
    if st.tracked:
        lines.append(f"• Login streak: <b>{st.streak}</b> day(s)")
        if st.bonus is not None:
            if st.bonus_active:
                lines.append(f"• 🌟 Bonus <b>{escape(st.bonus.bonus_gacha_name)}</b> is active")
            else:
                left = max(0, st.bonus.required_days - st.streak)
                lines.append(
                    f"• Bonus <b>{escape(st.bonus.bonus_gacha_name)}</b> unlocks in {left} day(s)"
                )
    else:
        lines.append("<i>Local mode: login streaks and bonus tables are off.</i>")
    return "\n".join(lines)


def history_text(results: list[DrawResult], tz: tzinfo = UTC) -> str:
    if not results:
        return "📜 <b>History</b>\nNo draws yet."

    lines = ["📜 <b>History</b> (newest first)"]
    for r in results:
        star = " ⭐" if r.is_bonus else ""
        when = r.timestamp.astimezone(tz).strftime("%Y-%m-%d %H:%M")
        lines.append(f"• {when} — <b>{escape(r.item_name)}</b> ({_pct(r.item_probability)}){star}")
    return "\n".join(lines)


def config_text(config: GachaConfig | None, bonus: LoginBonusConfig | None) -> str:
    if config is None:
        return (
            "⚙️ <b>No gacha configured yet.</b>\nCreate one like this:\n"
            "<code>/setconfig Diet gacha | 3\nSalad = 75\nCake = 25</code>\n"
            "or load a share code with /import &lt;code&gt;."
        )

    parts = [
        f"⚙️ <b>{escape(config.title)}</b>",
        f"Daily limit: <b>{config.daily_limit}</b>",
        format_table(config.items),
    ]
    if bonus is not None:
        limit = bonus.bonus_daily_limit if bonus.bonus_daily_limit is not None else config.daily_limit
        parts += [
            "",
            f"🌟 <b>{escape(bonus.bonus_gacha_name)}</b> after {bonus.required_days} login day(s)",
            f"Daily limit while active: <b>{limit}</b>",
            format_table(bonus.bonus_items),
        ]
    return "\n".join(parts)

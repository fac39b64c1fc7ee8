from .errors import (
    GachaError,
    InvalidConfig,
    InvalidProbabilityTable,
    InvalidShareCode,
    NoItemsAvailable,
    PersistenceError,
)
from .models import DrawResult, GachaConfig, Item, ItemTable, LoginBonusConfig, SessionState
from .table import validate, ensure_valid, validate_config, validate_bonus_config, table_total
from .draw import draw, select_table, make_result
from .tracker import (
    new_session_state,
    check_login,
    refresh_login,
    is_bonus_active,
    effective_limit,
    check_draw_allowed,
    roll_over,
    record_draw,
    remaining_draws,
)

__all__ = [
    "GachaError",
    "InvalidConfig",
    "InvalidProbabilityTable",
    "InvalidShareCode",
    "NoItemsAvailable",
    "PersistenceError",
    "DrawResult",
    "GachaConfig",
    "Item",
    "ItemTable",
    "LoginBonusConfig",
    "SessionState",
    "validate",
    "ensure_valid",
    "validate_config",
    "validate_bonus_config",
    "table_total",
    "draw",
    "select_table",
    "make_result",
    "new_session_state",
    "check_login",
    "refresh_login",
    "is_bonus_active",
    "effective_limit",
    "check_draw_allowed",
    "roll_over",
    "record_draw",
    "remaining_draws",
]

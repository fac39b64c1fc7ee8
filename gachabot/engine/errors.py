# gachabot/engine/errors.py
from __future__ import annotations


class GachaError(Exception):
    """Base class for draw/config errors surfaced to callers."""


class InvalidProbabilityTable(GachaError):
    def __init__(self, total: float, label: str = "items") -> None:
        self.total = total
        self.label = label
        super().__init__(f"Probabilities of {label} must add up to 100% (got {total:g}%)")


class InvalidConfig(GachaError):
    pass


class NoItemsAvailable(GachaError):
    def __init__(self) -> None:
        super().__init__("Cannot draw from an empty item table")


class InvalidShareCode(GachaError):
    pass


class PersistenceError(GachaError):
    """Raised by stores when the backend read/write fails."""

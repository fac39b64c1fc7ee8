from .base import GachaStore
from .local import LocalGachaStore
from .sql import SqlGachaStore

__all__ = ["GachaStore", "LocalGachaStore", "SqlGachaStore"]

from __future__ import annotations

from .settings import Settings

# Settings.load() runs in gachabot.main; nothing is read at import time.

__all__ = ["Settings"]

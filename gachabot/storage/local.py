# gachabot/storage/local.py
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from gachabot.engine.errors import PersistenceError
from gachabot.engine.models import DrawResult, GachaConfig, LoginBonusConfig, SessionState
from gachabot.storage.base import same_counters

log = logging.getLogger(__name__)

HISTORY_CAP = 50

# keys of the per-user document
KEY_CONFIG = "gachaConfig"
KEY_BONUS = "loginBonusConfig"
KEY_SESSION = "session"
KEY_RESULTS = "results"


def _file_stem(user_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]", "_", user_id) or "_"


class LocalGachaStore:
    """
    Untracked store: one JSON document per user on local disk.

    Plays the role of browser local storage, so it keeps no login streak
    (tracked=False) and only the newest `history_cap` results.

    File I/O is blocking and runs on the event loop. Small per-user
    documents keep that cheap at bot scale, and with no await between
    _read and _write every read-modify-write (compare-and-set included)
    is atomic with respect to other tasks on the same loop.
    """

    tracked = False

    def __init__(self, root: str | Path, *, history_cap: int = HISTORY_CAP) -> None:
        self.root = Path(root)
        self.history_cap = history_cap

    def _path(self, user_id: str) -> Path:
        return self.root / f"{_file_stem(user_id)}.json"

    def _read(self, user_id: str) -> dict[str, Any]:
        path = self._path(user_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}") from e

        try:
            doc = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("Ignoring unreadable local store document %s", path)
            return {}
        return doc if isinstance(doc, dict) else {}

    def _write(self, user_id: str, doc: dict[str, Any]) -> None:
        path = self._path(user_id)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(doc, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}") from e

    @staticmethod
    def _decode(doc: dict[str, Any], key: str, cls):
        data = doc.get(key)
        if not data:
            return None
        try:
            return cls.from_dict(data)
        except (KeyError, TypeError, ValueError):
            log.warning("Ignoring malformed %s in local store", key)
            return None

    # -------------------------------------------------
    # Session state
    # -------------------------------------------------

    async def load_session_state(self, user_id: str) -> SessionState | None:
        return self._decode(self._read(user_id), KEY_SESSION, SessionState)

    async def save_session_state(self, user_id: str, state: SessionState) -> None:
        doc = self._read(user_id)
        doc[KEY_SESSION] = state.to_dict()
        self._write(user_id, doc)

    async def compare_and_set_session_state(
        self,
        user_id: str,
        expected: SessionState | None,
        new: SessionState,
    ) -> bool:
        doc = self._read(user_id)
        current = self._decode(doc, KEY_SESSION, SessionState)
        if not same_counters(current, expected):
            return False
        doc[KEY_SESSION] = new.to_dict()
        self._write(user_id, doc)
        return True

    # -------------------------------------------------
    # Configs
    # -------------------------------------------------

    async def load_config(self, user_id: str) -> GachaConfig | None:
        return self._decode(self._read(user_id), KEY_CONFIG, GachaConfig)

    async def save_config(self, user_id: str, config: GachaConfig) -> None:
        doc = self._read(user_id)
        doc[KEY_CONFIG] = config.to_dict()
        self._write(user_id, doc)

    async def load_bonus_config(self, user_id: str) -> LoginBonusConfig | None:
        return self._decode(self._read(user_id), KEY_BONUS, LoginBonusConfig)

    async def save_bonus_config(self, user_id: str, bonus: LoginBonusConfig) -> None:
        doc = self._read(user_id)
        data = bonus.to_dict()
        stored = doc.get(KEY_BONUS) or {}
        # merge: an omitted override keeps the stored one
        if "bonusDailyLimit" not in data and stored.get("bonusDailyLimit") is not None:
            data["bonusDailyLimit"] = stored["bonusDailyLimit"]
        doc[KEY_BONUS] = data
        self._write(user_id, doc)

    async def delete_bonus_config(self, user_id: str) -> None:
        doc = self._read(user_id)
        if doc.pop(KEY_BONUS, None) is not None:
            self._write(user_id, doc)

    # -------------------------------------------------
    # History
    # -------------------------------------------------

    async def append_draw_result(self, user_id: str, result: DrawResult) -> bool:
        doc = self._read(user_id)
        results = [r for r in doc.get(KEY_RESULTS) or [] if isinstance(r, dict)]
        if any(r.get("id") == result.id for r in results):
            return False

        results.insert(0, result.to_dict())
        # newest first, oldest evicted past the cap
        doc[KEY_RESULTS] = results[: self.history_cap]
        self._write(user_id, doc)
        return True

    async def load_draw_history(self, user_id: str, max_count: int) -> list[DrawResult]:
        out: list[DrawResult] = []
        for data in self._read(user_id).get(KEY_RESULTS) or []:
            try:
                out.append(DrawResult.from_dict(data))
            except (KeyError, TypeError, ValueError):
                log.warning("Skipping malformed history entry for %s", user_id)
            if len(out) >= max_count:
                break
        return out

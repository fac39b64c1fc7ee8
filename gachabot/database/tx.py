# gachabot/database/tx.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gachabot.database.base import Base


@asynccontextmanager
async def transactional(session: AsyncSession) -> AsyncIterator[None]:
    """
    Write scope inside the per-update session (see DbSessionMiddleware).

    - already inside a transaction -> SAVEPOINT (begin_nested)
    - otherwise -> a fresh top-level transaction
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield
    else:
        async with session.begin():
            yield


async def insert_once(session: AsyncSession, row: Base) -> bool:
    """
    Insert `row` unless its primary key already exists.

    Draw result ids and per-user session rows may be written twice by
    racing updates. The savepoint confines the duplicate-key failure, so
    earlier writes of the same update (the counter CAS, a saved config)
    survive and the caller gets False instead of an exception.
    """
    try:
        async with transactional(session):
            session.add(row)
            await session.flush()
    except IntegrityError:
        return False
    return True

# gachabot/main.py
import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from gachabot.config import Settings
from gachabot.database import Database
from gachabot.handlers import router as handlers_router
from gachabot.storage.local import LocalGachaStore
from gachabot.utils.middleware import DbSessionMiddleware, LocalStoreMiddleware


def setup_logging(is_dev: bool) -> None:
    """
    Clean production logging:
    - app logs: INFO (or DEBUG in dev)
    - SQLAlchemy logs: WARNING+ (no query/pool spam)
    """
    app_level = logging.DEBUG if is_dev else logging.INFO

    logging.basicConfig(
        level=app_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    for name in (
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "sqlalchemy.orm",
        "aiosqlite",
        "asyncpg",
        "aiogram.event",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)


async def main() -> None:
    settings = Settings.load()
    setup_logging(settings.is_dev)
    log = logging.getLogger("gachabot")

    dp = Dispatcher()
    dp.workflow_data["settings"] = settings

    db: Database | None = None
    if settings.tracked:
        db = Database(settings.database_url)
        await db.init_models()
        log.info("DB initialized (tracked mode)")

        # DB session + store per update
        dp.update.middleware(DbSessionMiddleware(db))
    else:
        store = LocalGachaStore(settings.local_store_dir, history_cap=settings.local_history_cap)
        dp.update.middleware(LocalStoreMiddleware(store))
        log.info("No DATABASE_URL, using local store at %s (untracked mode)", settings.local_store_dir)

    dp.include_router(handlers_router)

    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    try:
        await dp.start_polling(bot)
    except (asyncio.CancelledError, KeyboardInterrupt):
        pass
    except Exception:
        log.exception("Bot crashed")
        raise
    finally:
        if db is not None:
            try:
                await db.close()
            except Exception:
                log.exception("Failed to close DB")

        try:
            await bot.session.close()
        except Exception:
            log.exception("Failed to close bot session")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

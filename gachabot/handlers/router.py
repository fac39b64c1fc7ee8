from aiogram import Router

from gachabot.handlers.common import router as common_router
from gachabot.handlers.config import router as config_router
from gachabot.handlers.draw import router as draw_router
from gachabot.handlers.start import router as start_router
from gachabot.handlers.status import router as status_router

router = Router()

router.include_router(start_router)
router.include_router(draw_router)
router.include_router(status_router)
router.include_router(config_router)
router.include_router(common_router)  # ✅ LAST = fallback only

from fastapi import APIRouter

from fantasy_cricket.api import admin, playing_xi

router = APIRouter()
router.include_router(playing_xi.router)
router.include_router(admin.router)

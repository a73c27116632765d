from fastapi import APIRouter

from studio.api.v1.galleries import router as galleries_router
from studio.api.v1.settings import router as settings_router
from studio.api.v1.styles import router as styles_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(galleries_router)
api_v1_router.include_router(styles_router)
api_v1_router.include_router(settings_router)

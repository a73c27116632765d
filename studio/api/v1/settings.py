"""Settings API — AI endpoint credentials and token usage."""

from fastapi import APIRouter, Depends

from studio.core.dependencies import get_setting_service
from studio.schemas.setting import GetSettingResponse, SaveSettingRequest, SaveSettingResponse, TokenUsageResponse
from studio.services.setting_service import SettingService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=GetSettingResponse)
async def get_setting(service: SettingService = Depends(get_setting_service)):
    """Current AI settings (masked — never returns the API key)."""
    return service.get()


@router.put("", response_model=SaveSettingResponse)
async def save_setting(payload: SaveSettingRequest, service: SettingService = Depends(get_setting_service)):
    service.save(payload)
    return SaveSettingResponse(success=True, message="Settings saved")


@router.get("/token-usage", response_model=TokenUsageResponse)
async def token_usage(service: SettingService = Depends(get_setting_service)):
    """Tokens used by galleries created in the current UTC day / month / year."""
    return service.token_usage()

"""AI settings and token usage schemas."""

from pydantic import BaseModel, Field


class SaveSettingRequest(BaseModel):
    api_url: str = Field(..., min_length=1)
    api_key: str
    model: str = Field(..., min_length=1)


class SaveSettingResponse(BaseModel):
    success: bool
    message: str


class GetSettingResponse(BaseModel):
    api_url: str
    model: str
    has_api_key: bool  # the key itself is never returned


class TokenUsageResponse(BaseModel):
    daily: int
    monthly: int
    yearly: int

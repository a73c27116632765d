"""Style library schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateStyleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    prompt: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)


class CreateStyleResponse(BaseModel):
    success: bool
    style_id: str
    message: str


class StyleItem(BaseModel):
    id: str
    name: str
    description: str
    prompt: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

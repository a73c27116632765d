"""Gallery / edit workflow schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ImageEditRequest(BaseModel):
    origin_image: str = Field(..., min_length=1)  # raw base64 or data: URI
    prompt: str = Field(..., min_length=1)
    style_name: str | None = None


class ImageEditResponse(BaseModel):
    success: bool
    effect_image: str | None = None
    gallery_id: str
    message: str


class StyleGenerateRequest(BaseModel):
    message_content: str = Field(..., min_length=1)


class StyleGenerateResponse(BaseModel):
    success: bool
    style_name: str | None = None
    style_prompt: str | None = None
    message: str


class BatchDeleteRequest(BaseModel):
    ids: list[str]


class BatchDeleteResponse(BaseModel):
    deleted: int


class GalleryItem(BaseModel):
    id: str
    origin_image: str
    effect_image: str
    total_input_tokens: int
    total_output_tokens: int
    total_tokens: int  # Gallery.total_tokens (input + output)
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageItem(BaseModel):
    id: str
    gallery_id: str
    role: str
    content: str
    tokens_used: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class GalleryDetail(GalleryItem):
    messages: list[MessageItem]

"""Styles API — the reusable style library."""

from fastapi import APIRouter, Depends, status

from studio.core.dependencies import get_style_service
from studio.schemas.style import CreateStyleRequest, CreateStyleResponse, StyleItem
from studio.services.style_service import StyleService

router = APIRouter(prefix="/styles", tags=["styles"])


@router.get("", response_model=list[StyleItem])
async def list_styles(service: StyleService = Depends(get_style_service)):
    return [StyleItem.model_validate(s) for s in service.list()]


@router.post("", response_model=CreateStyleResponse, status_code=status.HTTP_201_CREATED)
async def add_style(payload: CreateStyleRequest, service: StyleService = Depends(get_style_service)):
    """Names are unique; a duplicate returns 409."""
    style = service.create(payload)
    return CreateStyleResponse(success=True, style_id=style.id, message="Style added")


@router.delete("/{style_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_style(style_id: str, service: StyleService = Depends(get_style_service)):
    service.delete(style_id)

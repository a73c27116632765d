"""Galleries API — run image edits and browse their history."""

from fastapi import APIRouter, Depends

from studio.core.dependencies import get_edit_workflow, get_store, get_style_service
from studio.core.exceptions import NotFoundError
from studio.db.store import PersistenceStore
from studio.schemas.gallery import (
    BatchDeleteRequest,
    BatchDeleteResponse,
    GalleryDetail,
    GalleryItem,
    ImageEditRequest,
    ImageEditResponse,
    StyleGenerateRequest,
    StyleGenerateResponse,
)
from studio.services.edit_workflow import EditWorkflow
from studio.services.style_service import StyleService

router = APIRouter(prefix="/galleries", tags=["galleries"])


@router.post("/edit", response_model=ImageEditResponse)
async def edit_image(
    payload: ImageEditRequest,
    workflow: EditWorkflow = Depends(get_edit_workflow),
):
    """Edit an image with the configured model. Gateway failures come back as success=false."""
    return await workflow.edit_image(payload.origin_image, payload.prompt, payload.style_name)


@router.post("/generate-style", response_model=StyleGenerateResponse)
async def generate_style(
    payload: StyleGenerateRequest,
    service: StyleService = Depends(get_style_service),
):
    return await service.generate_from_message(payload.message_content)


@router.get("", response_model=list[GalleryItem])
async def list_galleries(store: PersistenceStore = Depends(get_store)):
    """Newest first."""
    with store.exclusive() as tx:
        return [GalleryItem.model_validate(g) for g in tx.list_galleries()]


@router.get("/{gallery_id}", response_model=GalleryDetail)
async def get_gallery(gallery_id: str, store: PersistenceStore = Depends(get_store)):
    with store.exclusive() as tx:
        gallery = tx.get_gallery(gallery_id)
        if gallery is None:
            raise NotFoundError(f"Gallery {gallery_id} not found")
        return GalleryDetail.model_validate(gallery)


@router.post("/batch-delete", response_model=BatchDeleteResponse)
async def batch_delete(payload: BatchDeleteRequest, store: PersistenceStore = Depends(get_store)):
    """Delete galleries and their messages. Unknown ids are ignored."""
    with store.exclusive() as tx:
        deleted = tx.delete_galleries(payload.ids)
    return BatchDeleteResponse(deleted=deleted)

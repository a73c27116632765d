"""Edit workflow — persists an image edit around a single AI gateway call.

States for one request:
  CREATED        gallery + user message written, settings and style read
  AWAITING_MODEL gateway call in flight (store NOT held)
  COMPLETED      assistant message written, gallery effect image and tokens set
  FAILED         gateway error surfaced (CREATED records are kept), or the
                 gallery was deleted while awaiting the model

The store's exclusive section is taken twice, once on each side of the call,
and never spans the ``await``.
"""

from __future__ import annotations

import logging
from enum import Enum

from studio.core.exceptions import ConfigError, NotFoundError
from studio.db.store import PersistenceStore, StoreSession
from studio.gateway.client import GatewayClient
from studio.gateway.types import GatewayError, GenericRequest
from studio.models.gallery import Gallery
from studio.models.message import ROLE_ASSISTANT, ROLE_USER, Message
from studio.schemas.gallery import ImageEditResponse
from studio.services.effect_image import extract_effect_image

logger = logging.getLogger(__name__)

EDIT_BASE_INSTRUCTION = "Please process this image according to the user's request."


class WorkflowState(str, Enum):
    CREATED = "created"
    AWAITING_MODEL = "awaiting_model"
    COMPLETED = "completed"
    FAILED = "failed"


def build_edit_prompt(prompt: str, style_prompt: str | None = None) -> str:
    """Base instruction, then the style instruction (if any), then the user's request."""
    parts = [EDIT_BASE_INSTRUCTION]
    if style_prompt:
        parts.append(f"Apply the following style: {style_prompt}")
    parts.append(f"User request: {prompt}")
    return " ".join(parts)


class EditWorkflow:
    def __init__(
        self,
        store: PersistenceStore,
        gateway: GatewayClient,
        max_tokens: int | None = 1000,
        temperature: float | None = 0.7,
    ):
        self.store = store
        self.gateway = gateway
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def edit_image(
        self,
        origin_image: str,
        prompt: str,
        style_name: str | None = None,
    ) -> ImageEditResponse:
        """Run one edit request end to end.

        Raises:
            ConfigError: no API key is configured (gallery and user message are kept).
        """
        # CREATED
        with self.store.exclusive() as tx:
            gallery = tx.create_gallery(
                Gallery(
                    origin_image=origin_image,
                    effect_image=origin_image,
                    total_input_tokens=0,
                    total_output_tokens=0,
                )
            )
            tx.create_message(Message(gallery_id=gallery.id, role=ROLE_USER, content=prompt))
            setting = tx.get_or_create_default_setting()
            style_prompt = self._resolve_style(tx, style_name)
            api_url, api_key, model = setting.api_url, setting.api_key, setting.model

        gallery_id = gallery.id
        self._log_state(WorkflowState.CREATED, gallery_id)

        if not api_key:
            raise ConfigError("Please configure the API key first")

        # AWAITING_MODEL
        request = GenericRequest(
            model=model,
            prompt=build_edit_prompt(prompt, style_prompt),
            image=origin_image,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        self._log_state(WorkflowState.AWAITING_MODEL, gallery_id)
        try:
            response = await self.gateway.call(request, api_url, api_key)
        except GatewayError as e:
            self._log_state(WorkflowState.FAILED, gallery_id, level=logging.WARNING, detail=e.message)
            return ImageEditResponse(
                success=False,
                effect_image=None,
                gallery_id=gallery_id,
                message=f"AI processing failed: {e.message}",
            )

        effect_image = extract_effect_image(response.content, origin_image)

        # COMPLETED
        try:
            with self.store.exclusive() as tx:
                gallery.effect_image = effect_image
                gallery.total_output_tokens = response.tokens_used
                tx.update_gallery(gallery)
                tx.create_message(
                    Message(
                        gallery_id=gallery_id,
                        role=ROLE_ASSISTANT,
                        content=response.content,
                        tokens_used=response.tokens_used,
                    )
                )
        except NotFoundError:
            # Deleted by another request while the model was working
            self._log_state(WorkflowState.FAILED, gallery_id, level=logging.WARNING, detail="gallery deleted")
            return ImageEditResponse(
                success=False,
                effect_image=None,
                gallery_id=gallery_id,
                message="Gallery was deleted while the image was being processed",
            )

        self._log_state(WorkflowState.COMPLETED, gallery_id, detail=f"{response.tokens_used} tokens")
        return ImageEditResponse(
            success=True,
            effect_image=effect_image,
            gallery_id=gallery_id,
            message="Image edit completed",
        )

    @staticmethod
    def _resolve_style(tx: StoreSession, style_name: str | None) -> str | None:
        if not style_name:
            return None
        style = tx.get_style_by_name(style_name)
        if style is None:
            logger.info("Style %r not found, editing without a style", style_name)
            return None
        return style.prompt

    @staticmethod
    def _log_state(state: WorkflowState, gallery_id: str, level: int = logging.INFO, detail: str = "") -> None:
        logger.log(
            level,
            "Edit %s -> %s%s",
            gallery_id,
            state.value,
            f" ({detail})" if detail else "",
            extra={"gallery_id": gallery_id},
        )

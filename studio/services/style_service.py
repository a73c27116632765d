"""Style library: CRUD plus generating a style from a chat message."""

from __future__ import annotations

import json
import logging
import re

from studio.core.exceptions import ConfigError, ConflictError, NotFoundError
from studio.db.store import PersistenceStore
from studio.gateway.client import GatewayClient
from studio.gateway.types import GatewayError, GenericRequest
from studio.models.style import Style
from studio.schemas.gallery import StyleGenerateResponse
from studio.schemas.style import CreateStyleRequest

logger = logging.getLogger(__name__)

DEFAULT_STYLE_NAME = "Custom style"
DEFAULT_STYLE_PROMPT = "Apply artistic style transformation"

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_BARE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_QUOTED = re.compile(r'"([^"]+)"')


def build_style_prompt(content: str) -> str:
    return (
        "Based on the following user request for image processing, generate a style name "
        "and description suitable for an AI image processing style library. "
        "Return only a JSON object with 'name' and 'prompt' fields. "
        f"User request: {content}"
    )


def _load_object(content: str) -> dict | None:
    candidates = [m.group(1) for m in _FENCED_BLOCK.finditer(content)]
    bare = _BARE_OBJECT.search(content)
    if bare:
        candidates.append(bare.group(0))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def parse_style_reply(content: str) -> tuple[str, str]:
    """Extract ``(name, prompt)`` from the model's reply.

    Prefers a JSON object (bare or in a fenced block). Otherwise the first
    double-quoted string is taken as the name.
    """
    data = _load_object(content)
    if data is not None:
        name = str(data.get("name") or "").strip() or DEFAULT_STYLE_NAME
        prompt = str(data.get("prompt") or "").strip() or DEFAULT_STYLE_PROMPT
        return name, prompt

    quoted = _QUOTED.search(content)
    name = quoted.group(1).strip() if quoted else ""
    return name or DEFAULT_STYLE_NAME, DEFAULT_STYLE_PROMPT


class StyleService:
    def __init__(self, store: PersistenceStore, gateway: GatewayClient, max_tokens: int = 200, temperature: float = 0.7):
        self.store = store
        self.gateway = gateway
        self.max_tokens = max_tokens
        self.temperature = temperature

    def create(self, payload: CreateStyleRequest) -> Style:
        with self.store.exclusive() as tx:
            if tx.get_style_by_name(payload.name) is not None:
                raise ConflictError(f"Style '{payload.name}' already exists")
            style = tx.create_style(
                Style(
                    name=payload.name,
                    description=payload.description,
                    prompt=payload.prompt,
                    tags=list(payload.tags),
                )
            )
        logger.info("Created style %s (%s)", style.name, style.id)
        return style

    def list(self) -> list[Style]:
        with self.store.exclusive() as tx:
            return tx.list_styles()

    def delete(self, style_id: str) -> None:
        with self.store.exclusive() as tx:
            if not tx.delete_style(style_id):
                raise NotFoundError(f"Style {style_id} not found")
        logger.info("Deleted style %s", style_id)

    async def generate_from_message(self, content: str) -> StyleGenerateResponse:
        """Ask the model to turn a chat message into a named style.

        Raises:
            ConfigError: no API key is configured.
        """
        with self.store.exclusive() as tx:
            setting = tx.get_or_create_default_setting()
            api_url, api_key, model = setting.api_url, setting.api_key, setting.model

        if not api_key:
            raise ConfigError("Please configure the API key first")

        request = GenericRequest(
            model=model,
            prompt=build_style_prompt(content),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        try:
            response = await self.gateway.call(request, api_url, api_key)
        except GatewayError as e:
            logger.warning("Style generation failed: %s", e.message)
            return StyleGenerateResponse(success=False, message=f"Style generation failed: {e.message}")

        name, prompt = parse_style_reply(response.content)
        return StyleGenerateResponse(
            success=True,
            style_name=name,
            style_prompt=prompt,
            message="Style generated",
        )

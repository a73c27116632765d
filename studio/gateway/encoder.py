"""Request encoder — builds the OpenAI-compatible chat-completions payload."""

from __future__ import annotations

from typing import Any

from studio.gateway.types import GenericRequest

DATA_URI_SCHEME = "data:"
DEFAULT_IMAGE_MIME = "image/jpeg"


def image_url_for(image: str) -> str:
    """Return a data URI for the image, leaving already-tagged URIs untouched."""
    if image.startswith(DATA_URI_SCHEME):
        return image
    return f"data:{DEFAULT_IMAGE_MIME};base64,{image}"


def build_messages(request: GenericRequest) -> list[dict[str, Any]]:
    """Build the single multimodal user message for a request.

    The text prompt always comes first; the image, if any, is appended as an
    ``image_url`` element. Image bytes are not validated here.
    """
    content: list[dict[str, Any]] = [{"type": "text", "text": request.prompt}]

    if request.image is not None:
        content.append(
            {
                "type": "image_url",
                "image_url": {"url": image_url_for(request.image)},
            }
        )

    return [{"role": "user", "content": content}]


def encode_payload(request: GenericRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": request.model,
        "messages": build_messages(request),
    }
    if request.max_tokens is not None:
        payload["max_tokens"] = request.max_tokens
    if request.temperature is not None:
        payload["temperature"] = request.temperature
    return payload

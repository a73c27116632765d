"""Response decoder — parses a successful chat-completions body into a NormalizedResponse.

Expected shape:
    {"choices": [{"message": {"content": str}, "finish_reason": str}],
     "usage": {"total_tokens": int}}

The request's model name is reported back rather than the vendor's, since
vendors do not reliably echo the exact requested model string.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, ValidationError

from studio.gateway.types import ErrorCategory, GatewayError, NormalizedResponse

logger = logging.getLogger(__name__)


class _ChoiceMessage(BaseModel):
    content: str


class _Choice(BaseModel):
    message: _ChoiceMessage
    finish_reason: str


class _Usage(BaseModel):
    total_tokens: int = Field(ge=0)


class _ChatCompletion(BaseModel):
    choices: list[_Choice]
    usage: _Usage


def decode_response(body: str, model: str) -> NormalizedResponse:
    """Decode a 2xx body.

    Raises:
        GatewayError: ``parse`` on a malformed body, ``empty_response`` when
            ``choices`` is empty.
    """
    try:
        completion = _ChatCompletion.model_validate_json(body)
    except ValidationError as e:
        raise GatewayError(
            ErrorCategory.PARSE,
            f"Failed to parse response: {e.error_count()} validation error(s), first: {e.errors()[0]['msg']}",
        ) from e

    if not completion.choices:
        raise GatewayError(ErrorCategory.EMPTY_RESPONSE, "AI returned an empty response")

    choice = completion.choices[0]
    return NormalizedResponse(
        content=choice.message.content,
        tokens_used=completion.usage.total_tokens,
        model=model,
        finish_reason=choice.finish_reason,
    )

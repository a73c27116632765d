"""AI gateway client.

Turns a vendor-neutral request into an OpenAI-compatible chat-completions call:
  - Request encoder (multimodal payload)
  - Transport client (one HTTP attempt over httpx)
  - Error classifier (retryable vs. terminal)
  - Response decoder (unified DTO with token usage)
  - Gateway client (bounded exponential backoff retry loop)
"""

from studio.gateway.client import GatewayClient
from studio.gateway.types import (
    GatewayError,
    GenericRequest,
    NormalizedResponse,
    RetryPolicy,
)

__all__ = [
    "GatewayClient",
    "GatewayError",
    "GenericRequest",
    "NormalizedResponse",
    "RetryPolicy",
]

"""Core types and DTOs for the AI gateway client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error categories
# ---------------------------------------------------------------------------


class ErrorCategory(str, Enum):
    """Categories the gateway assigns itself.

    Vendor error envelopes carry their own ``type`` string, which is used as the
    category verbatim, so ``GatewayError.category`` is a plain ``str`` rather
    than this enum.
    """

    NETWORK = "network"  # No response received
    RESPONSE_READ = "response_read"  # Response received, body unreadable
    API = "api"  # Non-2xx without a decodable vendor envelope
    PARSE = "parse"  # 2xx with a body of the wrong shape
    EMPTY_RESPONSE = "empty_response"  # 2xx with zero choices


# Categories that will not resolve by waiting. Compared case-sensitively.
TERMINAL_CATEGORIES: frozenset[str] = frozenset(
    {
        "auth_error",
        "quota_error",
        "image_error",
        ErrorCategory.PARSE.value,
    }
)


class GatewayError(Exception):
    """A classified gateway failure."""

    def __init__(
        self,
        category: str,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.category = category.value if isinstance(category, ErrorCategory) else category
        self.message = message
        self.code = code
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"GatewayError(category={self.category!r}, message={self.message!r}, code={self.code!r})"


# ---------------------------------------------------------------------------
# Request / response
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenericRequest:
    """A vendor-neutral "run this prompt (and image) through a model" request."""

    model: str
    prompt: str
    image: str | None = None  # raw base64 or a data: URI
    max_tokens: int | None = None
    temperature: float | None = None


@dataclass
class NormalizedResponse:
    """Unified result of a successful chat-completions call."""

    content: str
    tokens_used: int
    model: str
    finish_reason: str


@dataclass(frozen=True)
class RawResponse:
    """Status and body of one HTTP attempt, before classification."""

    status_code: int
    body: str


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff configuration (delays in seconds)."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0

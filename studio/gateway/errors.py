"""Error classifier — maps raw failures to GatewayErrors and decides retryability.

Three raw-failure shapes are handled here:
  - transport failure before any response      → ``network``
  - response received, body could not be read  → ``response_read``
  - non-2xx status                              → vendor envelope type, or ``api``

``parse`` and ``empty_response`` come from the response decoder.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ValidationError

from studio.gateway.types import TERMINAL_CATEGORIES, ErrorCategory, GatewayError

logger = logging.getLogger(__name__)


class _VendorErrorDetail(BaseModel):
    message: str
    type: str
    code: str | int | None = None


class _VendorErrorEnvelope(BaseModel):
    error: _VendorErrorDetail


def classify_transport_error(exc: Exception) -> GatewayError:
    return GatewayError(ErrorCategory.NETWORK, f"Network request failed: {exc}")


def classify_read_error(exc: Exception, status_code: int | None = None) -> GatewayError:
    return GatewayError(
        ErrorCategory.RESPONSE_READ,
        f"Failed to read response: {exc}",
        status_code=status_code,
    )


def classify_response(status_code: int, body: str) -> GatewayError | None:
    """Classify an HTTP status/body pair. Returns None for a 2xx status."""
    if 200 <= status_code < 300:
        return None

    try:
        envelope = _VendorErrorEnvelope.model_validate_json(body)
    except ValidationError:
        return GatewayError(
            ErrorCategory.API,
            f"API call failed ({status_code}): {body}",
            code=str(status_code),
            status_code=status_code,
        )

    detail = envelope.error
    return GatewayError(
        detail.type,
        detail.message,
        code=str(detail.code) if detail.code is not None else None,
        status_code=status_code,
    )


def should_retry(error: GatewayError) -> bool:
    """False for terminal categories, True for everything else."""
    return error.category not in TERMINAL_CATEGORIES

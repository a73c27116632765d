"""Transport client — performs one HTTP attempt against a chat-completions endpoint.

No retry logic lives here; the status and body are handed back for
classification by the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from studio.gateway.errors import classify_read_error, classify_transport_error
from studio.gateway.types import RawResponse

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"


def completions_url(endpoint: str) -> str:
    return f"{endpoint.rstrip('/')}{CHAT_COMPLETIONS_PATH}"


class TransportClient:
    """Single-shot JSON POST over httpx."""

    def __init__(
        self,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (stub endpoints in tests)
        """
        self.timeout = timeout
        self._transport = transport

    async def send(self, payload: dict[str, Any], endpoint: str, api_key: str) -> RawResponse:
        """POST the payload and return the raw status/body.

        Raises:
            GatewayError: ``network`` if no response arrived (including a
                request that could not be built),
                ``response_read`` if the body could not be read.
        """
        url = completions_url(endpoint)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        start = time.monotonic()

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                # Header encoding (non-ASCII key) and URL errors surface while building
                request = client.build_request("POST", url, json=payload, headers=headers)
                response = await client.send(request, stream=True)
            except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
                logger.warning("POST %s failed before a response: %s", url, e)
                raise classify_transport_error(e) from e

            try:
                await response.aread()
            except (httpx.HTTPError, httpx.StreamError) as e:
                logger.warning("POST %s: failed reading %d response body: %s", url, response.status_code, e)
                raise classify_read_error(e, status_code=response.status_code) from e
            finally:
                await response.aclose()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("POST %s -> %d in %dms", url, response.status_code, elapsed_ms)
        return RawResponse(status_code=response.status_code, body=response.text)

"""AI gateway client — the public retry loop.

Composes the encoder, transport, classifier, decoder and backoff scheduler:
  1. Encode the request once (identical payload on every attempt)
  2. Send via TransportClient
  3. Classify non-2xx responses, decode 2xx bodies
  4. Retry retryable failures with exponential backoff, up to max_retries
  5. Stop immediately on terminal categories

Usage:
    client = GatewayClient(policy=RetryPolicy(max_retries=3))
    response = await client.call(request, "https://api.openai.com/v1", "sk-...")
"""

from __future__ import annotations

import asyncio
import logging

from studio.gateway.backoff import delay_for, max_total_delay
from studio.gateway.decoder import decode_response
from studio.gateway.encoder import encode_payload
from studio.gateway.errors import classify_response, should_retry
from studio.gateway.transport import TransportClient
from studio.gateway.types import GatewayError, GenericRequest, NormalizedResponse, RetryPolicy

logger = logging.getLogger(__name__)


class GatewayClient:
    """Stateless between calls; holds only its RetryPolicy and transport."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        transport: TransportClient | None = None,
    ):
        self.policy = policy or RetryPolicy()
        self.transport = transport or TransportClient()

    async def call(
        self,
        request: GenericRequest,
        endpoint: str,
        api_key: str,
    ) -> NormalizedResponse:
        """Run the request through the retry loop.

        Raises:
            GatewayError: the last observed error once retries are exhausted or
                a terminal category is hit.
        """
        payload = encode_payload(request)
        policy = self.policy
        last_error: GatewayError | None = None

        logger.debug(
            "Calling %s with model %s (max_retries=%d, worst-case backoff %.1fs)",
            endpoint,
            request.model,
            policy.max_retries,
            max_total_delay(policy),
        )

        for attempt in range(policy.max_retries + 1):
            try:
                return await self._attempt(payload, request.model, endpoint, api_key)
            except GatewayError as e:
                last_error = e

            if attempt == policy.max_retries:
                break

            if not should_retry(last_error):
                logger.warning(
                    "AI call failed with terminal error [%s], not retrying: %s",
                    last_error.category,
                    last_error.message,
                )
                break

            delay = delay_for(attempt, policy)
            logger.info(
                "AI call failed [%s], retrying in %.1fs (%d/%d): %s",
                last_error.category,
                delay,
                attempt + 1,
                policy.max_retries,
                last_error.message,
            )
            await asyncio.sleep(delay)

        # At least one attempt always runs, so last_error is set here
        assert last_error is not None
        logger.error("AI call gave up [%s]: %s", last_error.category, last_error.message)
        raise last_error

    async def _attempt(
        self,
        payload: dict,
        model: str,
        endpoint: str,
        api_key: str,
    ) -> NormalizedResponse:
        raw = await self.transport.send(payload, endpoint, api_key)

        error = classify_response(raw.status_code, raw.body)
        if error is not None:
            raise error

        return decode_response(raw.body, model)

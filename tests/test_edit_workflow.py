"""Tests for the edit workflow: persistence around the gateway call."""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from studio.core.exceptions import ConfigError
from studio.gateway.client import GatewayClient
from studio.gateway.transport import TransportClient
from studio.gateway.types import GatewayError, GenericRequest, NormalizedResponse, RetryPolicy
from studio.models.message import ROLE_ASSISTANT, ROLE_USER
from studio.models.style import Style
from studio.services.edit_workflow import EDIT_BASE_INSTRUCTION, EditWorkflow, build_edit_prompt

ORIGIN = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJ"
GENERATED = "data:image/png;base64,R0VORVJBVEVEX0lNQUdF"


def _ok(content: str = "Here you go", tokens_used: int = 42) -> NormalizedResponse:
    return NormalizedResponse(content=content, tokens_used=tokens_used, model="gpt-4o", finish_reason="stop")


def _galleries(store):
    with store.exclusive() as tx:
        return tx.list_galleries()


def _messages(store, gallery_id):
    with store.exclusive() as tx:
        return tx.list_messages(gallery_id)


class TestBuildEditPrompt:
    def test_without_style(self):
        prompt = build_edit_prompt("make the sky purple")
        assert prompt.startswith(EDIT_BASE_INSTRUCTION)
        assert prompt.endswith("User request: make the sky purple")
        assert "style" not in prompt.lower()

    def test_style_goes_between_instruction_and_request(self):
        prompt = build_edit_prompt("make the sky purple", "watercolor with soft edges")
        base = prompt.index(EDIT_BASE_INSTRUCTION)
        style = prompt.index("watercolor with soft edges")
        request = prompt.index("make the sky purple")
        assert base < style < request


class TestEditWorkflow:
    @pytest.mark.asyncio
    async def test_success_updates_gallery(self, configured_store, gateway):
        gateway.call.return_value = _ok(f"Done: ![result]({GENERATED})", tokens_used=42)
        workflow = EditWorkflow(configured_store, gateway)

        result = await workflow.edit_image(ORIGIN, "make it blue")

        assert result.success is True
        assert result.effect_image == GENERATED
        assert result.effect_image != ORIGIN

        [gallery] = _galleries(configured_store)
        assert gallery.id == result.gallery_id
        assert gallery.origin_image == ORIGIN
        assert gallery.effect_image == GENERATED
        assert gallery.total_input_tokens == 0
        assert gallery.total_output_tokens == 42

    @pytest.mark.asyncio
    async def test_success_writes_user_then_assistant_message(self, configured_store, gateway):
        gateway.call.return_value = _ok("Sure, done", tokens_used=17)
        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue")

        messages = _messages(configured_store, result.gallery_id)
        assert [m.role for m in messages] == [ROLE_USER, ROLE_ASSISTANT]
        assert messages[0].content == "make it blue"
        assert messages[0].tokens_used is None
        assert messages[1].content == "Sure, done"
        assert messages[1].tokens_used == 17

    @pytest.mark.asyncio
    async def test_reply_without_image_gets_placeholder(self, configured_store, gateway):
        gateway.call.return_value = _ok("I made the sky blue")
        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue")

        assert result.success is True
        assert result.effect_image.startswith("data:image/svg+xml;base64,")
        assert result.effect_image != ORIGIN

    @pytest.mark.asyncio
    async def test_gateway_request(self, configured_store, gateway):
        workflow = EditWorkflow(configured_store, gateway, max_tokens=1000, temperature=0.7)
        await workflow.edit_image(ORIGIN, "make it blue")

        request, endpoint, api_key = gateway.call.await_args.args
        assert isinstance(request, GenericRequest)
        assert request.model == "gpt-4o"
        assert request.image == ORIGIN
        assert request.max_tokens == 1000
        assert request.temperature == 0.7
        assert request.prompt == build_edit_prompt("make it blue")
        assert endpoint == "https://api.example.com/v1"
        assert api_key == "sk-test"

    @pytest.mark.asyncio
    async def test_known_style_applied(self, configured_store, gateway):
        with configured_store.exclusive() as tx:
            tx.create_style(Style(name="Watercolor", description="", prompt="soft watercolor washes", tags=[]))

        await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue", style_name="Watercolor")

        request = gateway.call.await_args.args[0]
        assert request.prompt == build_edit_prompt("make it blue", "soft watercolor washes")

    @pytest.mark.asyncio
    async def test_unknown_style_ignored(self, configured_store, gateway):
        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue", style_name="Nope")

        assert result.success is True
        assert gateway.call.await_args.args[0].prompt == build_edit_prompt("make it blue")

    @pytest.mark.asyncio
    async def test_gateway_failure_keeps_records(self, configured_store, gateway):
        gateway.call.side_effect = GatewayError("auth_error", "Invalid API key", code="invalid_key")
        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue")

        assert result.success is False
        assert result.effect_image is None
        assert result.message == "AI processing failed: Invalid API key"

        [gallery] = _galleries(configured_store)
        assert gallery.id == result.gallery_id
        assert gallery.effect_image == ORIGIN
        assert gallery.total_output_tokens == 0
        assert [m.role for m in _messages(configured_store, gallery.id)] == [ROLE_USER]

    @pytest.mark.asyncio
    async def test_missing_api_key_raises_config_error(self, store, gateway):
        with pytest.raises(ConfigError):
            await EditWorkflow(store, gateway).edit_image(ORIGIN, "make it blue")

        gateway.call.assert_not_awaited()
        # Records written before the key check stay
        [gallery] = _galleries(store)
        assert [m.role for m in _messages(store, gallery.id)] == [ROLE_USER]
        with store.exclusive() as tx:
            assert tx.get_setting().api_key == ""

    @pytest.mark.asyncio
    async def test_store_not_held_during_gateway_call(self, configured_store):
        observed = []

        async def call(request, endpoint, api_key):
            observed.append(configured_store.locked)
            await asyncio.sleep(0)
            observed.append(configured_store.locked)
            return _ok()

        gateway = AsyncMock()
        gateway.call = AsyncMock(side_effect=call)

        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue")

        assert result.success is True
        assert observed == [False, False]
        assert configured_store.locked is False

    @pytest.mark.asyncio
    async def test_concurrent_edits_both_in_flight(self, configured_store):
        in_flight = 0
        both_in_flight = asyncio.Event()

        async def call(request, endpoint, api_key):
            nonlocal in_flight
            in_flight += 1
            if in_flight == 2:
                both_in_flight.set()
            # Only completes if the other edit could reach the gateway too
            await asyncio.wait_for(both_in_flight.wait(), timeout=2.0)
            return _ok(tokens_used=5)

        gateway = AsyncMock()
        gateway.call = AsyncMock(side_effect=call)
        workflow = EditWorkflow(configured_store, gateway)

        first, second = await asyncio.gather(
            workflow.edit_image(ORIGIN, "first"),
            workflow.edit_image(ORIGIN, "second"),
        )

        assert first.success and second.success
        assert first.gallery_id != second.gallery_id
        assert len(_galleries(configured_store)) == 2

    @pytest.mark.asyncio
    async def test_token_totals_match_assistant_messages(self, configured_store, gateway):
        gateway.call.return_value = _ok(tokens_used=123)
        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue")

        with configured_store.exclusive() as tx:
            gallery = tx.get_gallery(result.gallery_id)
            assistant_tokens = sum(
                m.tokens_used for m in tx.list_messages(gallery.id) if m.role == ROLE_ASSISTANT
            )
            assert gallery.total_input_tokens + gallery.total_output_tokens == assistant_tokens == 123

    @pytest.mark.asyncio
    async def test_gallery_deleted_while_awaiting_model(self, configured_store):
        async def call(request, endpoint, api_key):
            with configured_store.exclusive() as tx:
                [gallery] = tx.list_galleries()
                tx.delete_galleries([gallery.id])
            return _ok()

        gateway = AsyncMock()
        gateway.call = AsyncMock(side_effect=call)

        result = await EditWorkflow(configured_store, gateway).edit_image(ORIGIN, "make it blue")

        assert result.success is False
        assert result.effect_image is None
        assert "deleted" in result.message
        assert _galleries(configured_store) == []
        assert _messages(configured_store, result.gallery_id) == []

    @pytest.mark.asyncio
    async def test_unencodable_api_key_reported_as_failure(self, store):
        with store.exclusive() as tx:
            tx.save_setting("https://api.example.com/v1", "sk-тест", "gpt-4o")

        handler = AsyncMock(return_value=httpx.Response(200, json={}))
        gateway = GatewayClient(
            policy=RetryPolicy(max_retries=1),
            transport=TransportClient(transport=httpx.MockTransport(handler)),
        )

        with patch("studio.gateway.client.asyncio.sleep", new_callable=AsyncMock):
            result = await EditWorkflow(store, gateway).edit_image(ORIGIN, "make it blue")

        assert result.success is False
        assert result.message.startswith("AI processing failed: Network request failed")
        handler.assert_not_called()
        [gallery] = _galleries(store)
        assert gallery.effect_image == ORIGIN

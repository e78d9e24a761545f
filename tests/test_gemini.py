"""Tests for the Gemini model endpoint.

The HTTP client is a MagicMock, so these tests check request payloads
and response parsing only.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from tether.conversation import Conversation, ProposedCall
from tether.errors import ModelRequestError
from tether.providers.base import ProviderConfig, ToolConfig
from tether.providers.gemini import GeminiProvider
from tether.tools.schema import descriptor_from_listing, translate


CONTROL_LIGHT = translate(descriptor_from_listing({
    "name": "controlLight",
    "description": "Set the brightness and color temperature of a room light.",
    "inputSchema": {
        "properties": {
            "brightness": {"type": "number"},
            "colorTemperature": {"type": "string"},
        },
        "required": ["brightness", "colorTemperature"],
    },
}))


def _make_config(**overrides):
    values = {"api_key": "test-key", "model": "gemini-2.0-flash-001"}
    values.update(overrides)
    return ProviderConfig(**values)


def _make_provider(data=None, **overrides):
    client = MagicMock()
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = data or {"candidates": [{"content": {"parts": [{"text": "Done."}]}}]}
    response.raise_for_status = MagicMock()
    client.post.return_value = response
    return GeminiProvider(_make_config(**overrides), client=client), client


def _payload(client):
    call_kwargs = client.post.call_args
    return call_kwargs.kwargs.get("json") or call_kwargs[1].get("json")


class TestRequest:

    def test_url_and_key_param(self):
        prov, client = _make_provider()
        prov.generate(Conversation.start("hi"))

        args, kwargs = client.post.call_args
        assert args[0] == (
            "https://generativelanguage.googleapis.com/v1alpha/models/"
            "gemini-2.0-flash-001:generateContent"
        )
        assert kwargs["params"] == {"key": "test-key"}
        assert "Authorization" not in kwargs["headers"]

    def test_oauth_token_uses_bearer(self):
        prov, client = _make_provider(api_key="ya29.token")
        prov.generate(Conversation.start("hi"))

        kwargs = client.post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer ya29.token"
        assert kwargs["params"] == {}

    def test_custom_base_url_and_version(self):
        prov, _ = _make_provider(api_version="v1beta")
        assert prov.base_url.endswith("/v1beta/models")
        prov, _ = _make_provider(base_url="http://localhost:9000/models")
        assert prov.base_url == "http://localhost:9000/models"

    def test_plain_request_has_no_tools(self):
        prov, client = _make_provider()
        prov.generate(Conversation.start("hi"))

        payload = _payload(client)
        assert payload == {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]}

    def test_forced_call_config(self):
        prov, client = _make_provider()
        config = ToolConfig(
            force_call=True,
            allowed_names=("controlLight",),
            declarations=(CONTROL_LIGHT,),
        )
        prov.generate(Conversation.start("dim"), config)

        payload = _payload(client)
        assert payload["toolConfig"] == {
            "functionCallingConfig": {
                "mode": "ANY",
                "allowedFunctionNames": ["controlLight"],
            },
        }
        decls = payload["tools"][0]["functionDeclarations"]
        assert decls[0]["name"] == "controlLight"
        assert decls[0]["parameters"]["properties"]["brightness"] == {"type": "NUMBER"}

    def test_unforced_config_uses_auto(self):
        prov, client = _make_provider()
        config = ToolConfig(force_call=False, allowed_names=(), declarations=(CONTROL_LIGHT,))
        prov.generate(Conversation.start("dim"), config)

        assert _payload(client)["toolConfig"] == {"functionCallingConfig": {"mode": "AUTO"}}

    def test_generation_config(self):
        prov, client = _make_provider(temperature=0.2, max_tokens=256)
        prov.generate(Conversation.start("hi"))

        assert _payload(client)["generationConfig"] == {
            "temperature": 0.2,
            "maxOutputTokens": 256,
        }


class TestReply:

    def test_text_reply(self):
        prov, _ = _make_provider()
        reply = prov.generate(Conversation.start("hi"))
        assert reply.text == "Done."
        assert reply.proposed_calls == ()
        assert not reply.has_calls

    def test_function_calls_in_order(self):
        prov, _ = _make_provider({
            "candidates": [{"content": {"parts": [
                {"functionCall": {"name": "controlLight", "args": {"brightness": 25, "colorTemperature": "warm"}}},
                {"functionCall": {"name": "controlLight"}},
            ]}}],
            "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 5},
        })
        reply = prov.generate(Conversation.start("dim"))

        assert reply.text is None
        assert reply.proposed_calls == (
            ProposedCall("controlLight", {"brightness": 25, "colorTemperature": "warm"}),
            ProposedCall("controlLight", {}),
        )
        assert reply.total_tokens == 17

    def test_multiple_text_parts_joined(self):
        prov, _ = _make_provider({"candidates": [{"content": {"parts": [
            {"text": "Hello "}, {"text": "world"},
        ]}}]})
        assert prov.generate(Conversation.start("hi")).text == "Hello world"

    def test_no_candidates(self):
        prov, _ = _make_provider({"promptFeedback": {"blockReason": "SAFETY"}})
        reply = prov.generate(Conversation.start("hi"))
        assert reply.text is None
        assert reply.proposed_calls == ()


class TestErrors:

    def test_http_status_error(self):
        prov, client = _make_provider()
        request = httpx.Request("POST", "https://example.test")
        response = httpx.Response(429, json={"error": {"message": "quota exceeded"}}, request=request)
        client.post.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "429", request=request, response=response,
        )

        with pytest.raises(ModelRequestError, match="quota exceeded") as exc:
            prov.generate(Conversation.start("hi"))
        assert exc.value.status_code == 429

    def test_transport_error(self):
        prov, client = _make_provider()
        client.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ModelRequestError, match="connection refused") as exc:
            prov.generate(Conversation.start("hi"))
        assert exc.value.status_code is None

    def test_invalid_json(self):
        prov, client = _make_provider()
        client.post.return_value.json.side_effect = ValueError("Expecting value")

        with pytest.raises(ModelRequestError, match="invalid JSON"):
            prov.generate(Conversation.start("hi"))

    def test_close_closes_client(self):
        prov, client = _make_provider()
        prov.close()
        client.close.assert_called_once()

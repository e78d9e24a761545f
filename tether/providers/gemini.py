"""Google Gemini provider implementation."""

import logging
from typing import Optional

import httpx

from ..conversation import Conversation, ProposedCall
from ..errors import ModelRequestError
from .base import BaseProvider, ProviderConfig, ToolConfig
from .response import ModelReply

_log = logging.getLogger(__name__)

DEFAULT_HOST = "https://generativelanguage.googleapis.com"


class GeminiProvider(BaseProvider):
    """Google Gemini generateContent endpoint."""

    def __init__(self, config: ProviderConfig, client: Optional[httpx.Client] = None):
        super().__init__(config)
        self.base_url = config.base_url or f"{DEFAULT_HOST}/{config.api_version}/models"
        self.client = client or httpx.Client(timeout=config.timeout)
        # OAuth tokens (from Gemini CLI) start with "ya29." and use Bearer auth
        # API keys use ?key= query param
        self._use_bearer = config.api_key.startswith("ya29.")

    def _auth_params(self) -> tuple[dict, dict]:
        """Return (headers, params) for authentication."""
        headers = {"Content-Type": "application/json"}
        if self._use_bearer:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
            return headers, {}
        return headers, {"key": self.config.api_key}

    def build_payload(
        self,
        conversation: Conversation,
        tool_config: Optional[ToolConfig] = None,
    ) -> dict:
        """Build the JSON body for a generateContent request."""
        payload: dict = {"contents": conversation.to_payload()}

        generation = {}
        if self.config.temperature is not None:
            generation["temperature"] = self.config.temperature
        if self.config.max_tokens:
            generation["maxOutputTokens"] = self.config.max_tokens
        if generation:
            payload["generationConfig"] = generation

        if tool_config is not None:
            payload["tools"] = [{
                "functionDeclarations": [d.to_dict() for d in tool_config.declarations],
            }]
            if tool_config.force_call:
                calling = {
                    "mode": "ANY",
                    "allowedFunctionNames": list(tool_config.allowed_names),
                }
            else:
                calling = {"mode": "AUTO"}
            payload["toolConfig"] = {"functionCallingConfig": calling}

        return payload

    def generate(
        self,
        conversation: Conversation,
        tool_config: Optional[ToolConfig] = None,
    ) -> ModelReply:
        """Send one generateContent request and parse the first candidate."""
        url = f"{self.base_url}/{self.config.model}:generateContent"
        headers, params = self._auth_params()
        payload = self.build_payload(conversation, tool_config)

        try:
            response = self.client.post(url, json=payload, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ModelRequestError(
                f"Gemini returned {e.response.status_code}: {_error_message(e.response)}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ModelRequestError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise ModelRequestError(f"Gemini returned invalid JSON: {e}") from e

        return self.parse_reply(data)

    def parse_reply(self, data: dict) -> ModelReply:
        """Extract text and function calls from a generateContent response."""
        usage = data.get("usageMetadata", {})
        in_t = usage.get("promptTokenCount", 0)
        out_t = usage.get("candidatesTokenCount", 0)

        candidates = data.get("candidates") or []
        if not candidates:
            _log.debug("Gemini reply had no candidates")
            return ModelReply(input_tokens=in_t, output_tokens=out_t, model=self.config.model)

        parts = (candidates[0].get("content") or {}).get("parts") or []

        text_parts = []
        calls = []
        for part in parts:
            if "text" in part:
                text_parts.append(part["text"])
            elif "functionCall" in part:
                fc = part["functionCall"]
                calls.append(ProposedCall(name=fc.get("name", ""), args=fc.get("args") or {}))

        return ModelReply(
            text="".join(text_parts) if text_parts else None,
            proposed_calls=tuple(calls),
            input_tokens=in_t,
            output_tokens=out_t,
            model=self.config.model,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:512]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message", "")
    return str(body)[:512]

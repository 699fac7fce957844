"""Anthropic Claude provider."""

import asyncio
import os
from typing import Any, Dict, List, Optional

from .base import GenerateOptions, LLMProvider, LLMResponse

try:
    import anthropic
    ANTHROPIC_AVAILABLE = True
except ImportError:
    ANTHROPIC_AVAILABLE = False


class AnthropicProvider(LLMProvider):
    """Claude via the Anthropic Messages API."""

    def __init__(self, api_key: Optional[str] = None):
        self._client = None
        api_key = api_key or os.getenv("ANTHROPIC_API_KEY", "")
        if api_key and api_key != "your-anthropic-api-key" and ANTHROPIC_AVAILABLE:
            try:
                self._client = anthropic.Anthropic(api_key=api_key)
            except Exception:
                self._client = None

    @property
    def name(self) -> str:
        return "anthropic"

    async def is_available(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        system: str,
        options: GenerateOptions,
    ) -> LLMResponse:
        if not self._client:
            raise ConnectionError("Anthropic client not initialized")

        def _call():
            params: Dict[str, Any] = {
                "model": options.model,
                "max_tokens": options.max_tokens,
                "temperature": options.temperature,
                "messages": messages,
            }
            if system:
                params["system"] = system
            return self._client.messages.create(**params)

        raw = await asyncio.to_thread(_call)
        return self._parse_response(raw)

    def _parse_response(self, raw: Any) -> LLMResponse:
        text_parts = [block.text for block in raw.content if block.type == "text"]
        return LLMResponse(
            text="\n".join(text_parts),
            input_tokens=raw.usage.input_tokens,
            output_tokens=raw.usage.output_tokens,
            model=raw.model,
            provider=self.name,
            stop_reason=raw.stop_reason or "",
            raw=raw,
        )

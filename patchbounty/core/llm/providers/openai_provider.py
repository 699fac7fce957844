"""OpenAI provider: chat completions with JSON mode."""

import asyncio
import os
from typing import Any, Dict, List, Optional

from .base import GenerateOptions, LLMProvider, LLMResponse

try:
    import openai
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions API."""

    def __init__(self, api_key: Optional[str] = None):
        self._client = None
        api_key = api_key or os.getenv("OPENAI_API_KEY", "")
        if api_key and api_key != "your-openai-api-key" and OPENAI_AVAILABLE:
            try:
                self._client = openai.OpenAI(api_key=api_key)
            except Exception:
                self._client = None

    @property
    def name(self) -> str:
        return "openai"

    async def is_available(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        system: str,
        options: GenerateOptions,
    ) -> LLMResponse:
        if not self._client:
            raise ConnectionError("OpenAI client not initialized")

        def _call():
            api_messages = []
            if system:
                api_messages.append({"role": "system", "content": system})
            api_messages.extend({"role": m["role"], "content": m["content"]} for m in messages)
            return self._client.chat.completions.create(
                model=options.model,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
                messages=api_messages,
                response_format={"type": "json_object"},
            )

        raw = await asyncio.to_thread(_call)
        choice = raw.choices[0]
        usage = raw.usage
        return LLMResponse(
            text=choice.message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=raw.model,
            provider=self.name,
            stop_reason=choice.finish_reason or "",
            raw=raw,
        )

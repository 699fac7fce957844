"""AWS Bedrock provider: Converse API for Claude models."""

import asyncio
import os
from typing import Any, Dict, List, Optional

from .base import GenerateOptions, LLMProvider, LLMResponse

try:
    import boto3
    BOTO3_AVAILABLE = True
except ImportError:
    BOTO3_AVAILABLE = False


class BedrockProvider(LLMProvider):
    """AWS Bedrock Converse API."""

    def __init__(self, region: Optional[str] = None):
        self._client = None
        self._region = region or os.getenv("AWS_BEDROCK_REGION", "us-east-1")
        if BOTO3_AVAILABLE:
            try:
                # Only attempt Bedrock if AWS credentials are explicitly configured;
                # the EC2 metadata probe takes a minute to time out elsewhere.
                import botocore.session
                session = botocore.session.get_session()
                creds = session.get_credentials()
                if creds is None or creds.access_key is None:
                    return

                self._client = boto3.client("bedrock-runtime", region_name=self._region)
            except Exception:
                self._client = None

    @property
    def name(self) -> str:
        return "bedrock"

    async def is_available(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        system: str,
        options: GenerateOptions,
    ) -> LLMResponse:
        if not self._client:
            raise ConnectionError("Bedrock client not initialized")

        def _call():
            bedrock_messages = [
                {"role": msg["role"], "content": [{"text": msg["content"]}]}
                for msg in messages
            ]
            params: Dict[str, Any] = {
                "modelId": options.model,
                "messages": bedrock_messages,
                "inferenceConfig": {
                    "maxTokens": options.max_tokens,
                    "temperature": options.temperature,
                },
            }
            if system:
                params["system"] = [{"text": system}]
            return self._client.converse(**params)

        raw = await asyncio.to_thread(_call)
        return self._parse_response(raw, options)

    def _parse_response(self, raw: Dict, options: GenerateOptions) -> LLMResponse:
        message = raw.get("output", {}).get("message", {})
        text_parts = [block["text"] for block in message.get("content", []) if "text" in block]
        usage = raw.get("usage", {})
        return LLMResponse(
            text="\n".join(text_parts),
            input_tokens=usage.get("inputTokens", 0),
            output_tokens=usage.get("outputTokens", 0),
            model=options.model,
            provider=self.name,
            stop_reason=raw.get("stopReason", ""),
            raw=raw,
        )

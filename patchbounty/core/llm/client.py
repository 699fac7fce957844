"""Provider construction and JSON extraction for remote evaluator tiers."""

import json
import logging
from typing import Any, Dict, Optional, Type

from .providers.anthropic_provider import AnthropicProvider
from .providers.base import LLMProvider
from .providers.bedrock_provider import BedrockProvider
from .providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "bedrock": BedrockProvider,
    "openai": OpenAIProvider,
}

# Normalize "claude" to "anthropic"
PROVIDER_ALIASES = {"claude": "anthropic"}


class LLMConnectionError(Exception):
    """Exception raised when LLM connection fails."""
    pass


def create_provider(name: str, config: Optional[Dict[str, Any]] = None) -> LLMProvider:
    """Instantiate a provider by name.

    ``config`` carries constructor credentials: ``api_key`` for anthropic and
    openai, ``region`` for bedrock.
    """
    config = config or {}
    key = PROVIDER_ALIASES.get(name.strip().lower(), name.strip().lower())
    cls = PROVIDER_CLASSES.get(key)
    if cls is None:
        raise LLMConnectionError(f"Unknown LLM provider: {name}")
    if key == "bedrock":
        return cls(region=config.get("region"))
    return cls(api_key=config.get("api_key"))


def extract_json(text: str) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from LLM text output.

    Handles common LLM output quirks:
    - Markdown code fences (```json ... ```)
    - Leading/trailing text around JSON
    - Nested braces

    Returns:
        Parsed dict, or None on failure.
    """
    if not text:
        return None

    # Strip markdown code fences
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [l for l in cleaned.split("\n") if not l.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()

    # Try parsing the whole thing first
    try:
        result = json.loads(cleaned)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass

    start = cleaned.find("{")
    if start < 0:
        return None

    # Walk forward tracking nesting depth
    depth = 0
    in_string = False
    escape_next = False
    end = -1

    for i in range(start, len(cleaned)):
        c = cleaned[i]
        if escape_next:
            escape_next = False
            continue
        if c == "\\":
            escape_next = True
            continue
        if c == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                end = i + 1
                break

    if end > start:
        try:
            result = json.loads(cleaned[start:end])
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            logger.debug("Balanced JSON candidate failed to parse")

    return None

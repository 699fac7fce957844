"""LLM layer backing the remote evaluator tiers.

Usage:
    from patchbounty.core.llm import create_provider, GenerateOptions

    provider = create_provider("bedrock", {"region": "us-east-1"})
    if await provider.is_available():
        response = await provider.generate(
            [{"role": "user", "content": prompt}], system, GenerateOptions(model=model_id)
        )
"""

from .client import LLMConnectionError, PROVIDER_CLASSES, create_provider, extract_json
from .providers.base import GenerateOptions, LLMProvider, LLMResponse

__all__ = [
    "LLMConnectionError",
    "PROVIDER_CLASSES",
    "create_provider",
    "extract_json",
    "GenerateOptions",
    "LLMProvider",
    "LLMResponse",
]

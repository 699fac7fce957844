"""LLM provider implementations."""

from .base import GenerateOptions, LLMProvider, LLMResponse

__all__ = ["GenerateOptions", "LLMProvider", "LLMResponse"]

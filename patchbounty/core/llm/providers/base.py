"""Base provider interface and shared data structures for the LLM layer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    text: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    provider: str = ""
    stop_reason: str = ""
    raw: Any = None  # Provider-specific raw response for debugging

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class GenerateOptions:
    """Options passed to provider generate methods."""
    model: str = ""
    temperature: float = 0.0
    max_tokens: int = 1024


class LLMProvider(ABC):
    """Abstract base for all LLM providers.

    Each provider translates the unified interface into provider-specific API calls.
    Providers are stateless; configuration is passed via GenerateOptions.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'anthropic', 'bedrock')."""
        ...

    @abstractmethod
    async def generate(
        self,
        messages: List[Dict[str, Any]],
        system: str,
        options: GenerateOptions,
    ) -> LLMResponse:
        """Generate a response from the LLM.

        Args:
            messages: Conversation messages in unified format:
                [{"role": "user"|"assistant", "content": str}]
            system: System prompt text.
            options: Generation parameters (model, temperature, etc.).

        Returns:
            LLMResponse with text and token counts.
        """
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if this provider is configured."""
        ...

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class LLMResponse:
    content: str
    model: str
    usage: Optional[dict] = None


class LLMProviderError(Exception):
    """Provider answered with a non-success status."""

    def __init__(self, provider: str, status_code: int, body: str):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} API error: {status_code} - {body[:200]}")


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "llm"

    @abstractmethod
    def generate(
        self,
        messages: List[dict],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout_seconds: Optional[float] = None,
    ) -> LLMResponse:
        """Generate response from LLM."""
        pass

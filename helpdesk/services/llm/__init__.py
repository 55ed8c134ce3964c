from typing import Optional

from helpdesk.config import Settings
from helpdesk.logging_config import get_logger
from helpdesk.services.llm.base import LLMProvider, LLMProviderError, LLMResponse
from helpdesk.services.llm.gemini_provider import GeminiProvider
from helpdesk.services.llm.openai_provider import OpenAIProvider

logger = get_logger("llm")


def build_llm_provider(settings: Settings) -> Optional[LLMProvider]:
    """Provider selected by LLM_PROVIDER, or None when its API key is missing."""
    if settings.llm_provider == "openai":
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY missing; fallback will use default message")
            return None
        logger.info("OpenAI provider initialised", extra={"context": {"model": settings.openai_model}})
        return OpenAIProvider(settings.openai_api_key, default_model=settings.openai_model)

    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY missing; fallback will use default message")
        return None
    logger.info("Gemini provider initialised", extra={"context": {"model": settings.gemini_model}})
    return GeminiProvider(settings.gemini_api_key, default_model=settings.gemini_model)


__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "GeminiProvider",
    "OpenAIProvider",
    "build_llm_provider",
]

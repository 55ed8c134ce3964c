import asyncio
from typing import Optional

from helpdesk.logging_config import get_logger
from helpdesk.services.llm import LLMProvider
from helpdesk.services.result import Result

logger = get_logger("ai_service")

MSG_NOT_UNDERSTOOD = "I'm sorry, I didn't catch that. Could you please rephrase?"
MSG_STILL_NOT_UNDERSTOOD = "I'm sorry, I still didn't understand. Could you please clarify?"

DEFAULT_TIMEOUT_SECONDS = 10.0
FALLBACK_TEMPERATURE = 0.4
FALLBACK_MAX_TOKENS = 512


class GenerativeFallback:
    """Generative answer for turns without a deterministic reply.

    ``generate`` never raises: provider errors and timeouts are logged with an
    error code and replaced by a canned apology.
    """

    def __init__(self, provider: Optional[LLMProvider], timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self._provider = provider
        self._timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    async def complete(self, prompt: str) -> Result[str]:
        """Single provider call; blank output is a success with empty text."""
        if self._provider is None:
            return Result.skipped("llm provider not configured")

        messages = [{"role": "user", "content": prompt}]
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self._provider.generate,
                    messages,
                    temperature=FALLBACK_TEMPERATURE,
                    max_tokens=FALLBACK_MAX_TOKENS,
                    timeout_seconds=self._timeout_seconds,
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            return Result.failure(f"no answer within {self._timeout_seconds}s", "llm_timeout")
        except Exception as exc:
            return Result.failure(str(exc), "llm_error")

        return Result.success((response.content or "").strip())

    async def generate(self, prompt: str) -> str:
        result = await self.complete(prompt)

        if result.is_skipped:
            logger.warning("Generative client not available; using default fallback message")
            return MSG_NOT_UNDERSTOOD

        if not result.ok:
            logger.error(
                "Generative fallback failed",
                extra={"context": {"error_code": result.error_code, "error": result.error}},
            )
            return MSG_NOT_UNDERSTOOD

        return result.value or MSG_STILL_NOT_UNDERSTOOD

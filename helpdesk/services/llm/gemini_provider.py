from typing import List, Optional

import httpx

from helpdesk.logging_config import get_logger
from helpdesk.services.llm.base import LLMProvider, LLMProviderError, LLMResponse

logger = get_logger("llm.gemini")

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


def normalize_model_name(name: Optional[str]) -> str:
    """Strip the "models/" prefix and whitespace."""
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned


def to_gemini_contents(messages: List[dict]) -> tuple[list[dict], Optional[str]]:
    """Convert chat-style messages into Gemini contents plus a system instruction."""
    contents: list[dict] = []
    system_parts: list[str] = []
    for message in messages:
        role = message.get("role", "user")
        text = message.get("content") or ""
        if not text:
            continue
        if role == "system":
            system_parts.append(text)
            continue
        contents.append({"role": "model" if role == "assistant" else "user", "parts": [{"text": text}]})
    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return contents, system_instruction


class GeminiProvider(LLMProvider):
    """Google Gemini provider over the Generative Language REST API."""

    name = "gemini"

    def __init__(self, api_key: str, default_model: str = "gemini-1.5-flash"):
        self.api_key = api_key
        self.default_model = normalize_model_name(default_model)
        self.base_url = GEMINI_API_BASE

    def generate(
        self,
        messages: List[dict],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout_seconds: Optional[float] = None,
    ) -> LLMResponse:
        """Generate response from Gemini."""
        model = normalize_model_name(model) or self.default_model
        if not model:
            raise ValueError("Gemini model name is required")

        contents, system_instruction = to_gemini_contents(messages)
        payload: dict = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        timeout = timeout_seconds if timeout_seconds is not None else 60.0
        logger.debug(f"Gemini request: model={model}, contents_count={len(contents)}")
        with httpx.Client(timeout=timeout) as client:
            response = client.post(
                f"{self.base_url}/models/{model}:generateContent",
                headers={
                    "x-goog-api-key": self.api_key,
                    "Content-Type": "application/json",
                },
                json=payload,
            )

        logger.debug(f"Gemini response status: {response.status_code}")
        if response.status_code != 200:
            raise LLMProviderError(self.name, response.status_code, response.text)

        data = response.json()
        texts: list[str] = []
        candidates = data.get("candidates") or []
        if candidates:
            parts = (candidates[0].get("content") or {}).get("parts") or []
            texts = [part["text"] for part in parts if isinstance(part, dict) and part.get("text")]

        return LLMResponse(
            content="".join(texts),
            model=data.get("modelVersion", model),
            usage=data.get("usageMetadata"),
        )

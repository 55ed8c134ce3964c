from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: Optional[str] = None
    database_create_tables: bool = False
    conversations_table: str = "support_conversations"
    faq_table: str = "faqs"
    feedback_table: str = "feedbacks"

    llm_provider: Literal["gemini", "openai"] = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 10.0

    fallback_confidence_threshold: float = 0.6
    pending_session_ttl_seconds: float = 1800.0
    pending_session_max_entries: int = 10000
    pending_session_sweep_interval_seconds: float = 60.0

    port: int = 3000
    log_level: str = "INFO"
    cors_allow_origins: str = "*"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url and self.database_url.strip())

    @property
    def cors_origins(self) -> list[str]:
        origins = [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()

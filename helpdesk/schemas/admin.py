from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class TableTotals(BaseModel):
    conversations: int
    faqs: int
    feedback: int


class FaqUsage(BaseModel):
    question: str
    count: int


class RecentUser(BaseModel):
    user_email: str
    user_name: Optional[str] = None
    channel: Optional[str] = None
    last_seen_at: Optional[datetime] = None


class AdminOverviewResponse(BaseModel):
    totals: TableTotals
    recent_conversations: list[dict[str, Any]]
    faq_usage: list[FaqUsage]
    gemini_usage_by_intent: dict[str, int]
    fallback_reasons: dict[str, int]
    recent_users: list[RecentUser]
    generated_at: datetime

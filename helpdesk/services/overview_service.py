from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from helpdesk.services.persistence_service import OverviewData

FAQ_USAGE_LIMIT = 10
RECENT_USERS_LIMIT = 20

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _as_aware(value: Optional[datetime]) -> datetime:
    if not isinstance(value, datetime):
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def faq_usage(faq_rows: Iterable[dict[str, Any]], limit: int = FAQ_USAGE_LIMIT) -> list[dict[str, Any]]:
    """Most asked questions; ties keep first-seen (most recent) order."""
    counter: Counter[str] = Counter()
    for row in faq_rows:
        question = (row.get("question_text") or "").strip()
        if question:
            counter[question] += 1
    return [{"question": question, "count": count} for question, count in counter.most_common(limit)]


def gemini_usage_by_intent(conversation_rows: Iterable[dict[str, Any]]) -> dict[str, int]:
    counter: Counter[str] = Counter()
    for row in conversation_rows:
        if row.get("used_gemini"):
            counter[row.get("intent_name") or "unknown"] += 1
    return dict(counter.most_common())


def fallback_reasons(conversation_rows: Iterable[dict[str, Any]]) -> dict[str, int]:
    counter = Counter(row["fallback_reason"] for row in conversation_rows if row.get("fallback_reason"))
    return dict(counter.most_common())


def recent_users(conversation_rows: Iterable[dict[str, Any]], limit: int = RECENT_USERS_LIMIT) -> list[dict[str, Any]]:
    """Latest row per email, newest first."""
    latest: dict[str, dict[str, Any]] = {}
    for row in conversation_rows:
        email = (row.get("user_email") or "").strip()
        if not email:
            continue
        key = email.lower()
        seen = latest.get(key)
        if seen is None or _as_aware(row.get("created_at")) > _as_aware(seen.get("created_at")):
            latest[key] = row

    users = [
        {
            "user_email": (row.get("user_email") or "").strip(),
            "user_name": row.get("user_name"),
            "channel": row.get("channel"),
            "last_seen_at": row.get("created_at"),
        }
        for row in latest.values()
    ]
    users.sort(key=lambda user: _as_aware(user["last_seen_at"]), reverse=True)
    return users[:limit]


def build_overview(data: OverviewData) -> dict[str, Any]:
    return {
        "totals": {
            "conversations": data.totals.get("conversations", 0),
            "faqs": data.totals.get("faqs", 0),
            "feedback": data.totals.get("feedback", 0),
        },
        "recent_conversations": data.recent_conversations,
        "faq_usage": faq_usage(data.faq_sample),
        "gemini_usage_by_intent": gemini_usage_by_intent(data.conversation_sample),
        "fallback_reasons": fallback_reasons(data.conversation_sample),
        "recent_users": recent_users(data.conversation_sample),
        "generated_at": datetime.now(timezone.utc),
    }

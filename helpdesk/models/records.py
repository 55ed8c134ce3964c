import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Text, Uuid

from helpdesk.config import get_settings
from helpdesk.database import Base

_settings = get_settings()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationRecord(Base):
    __tablename__ = _settings.conversations_table

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Text)
    intent_name = Column(Text)
    user_name = Column(Text)
    user_email = Column(Text)
    user_message = Column(Text)
    channel = Column(Text)  # dialogflow, telegram, web ...
    response_text = Column(Text)
    intent_confidence = Column(Float)
    used_gemini = Column(Boolean, nullable=False, default=False)
    fallback_reason = Column(Text)  # low_confidence, unknown_intent, faq_followup ...
    record_type = Column(Text)  # support, faq, faq_start, feedback, feedback_start
    feedback_rating = Column(Float)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class FaqRecord(Base):
    __tablename__ = _settings.faq_table

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Text)
    user_name = Column(Text)
    user_email = Column(Text)
    question_text = Column(Text)
    answer_text = Column(Text)
    channel = Column(Text)
    intent_name = Column(Text)
    intent_confidence = Column(Float)
    used_gemini = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class FeedbackRecord(Base):
    __tablename__ = _settings.feedback_table

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Text)
    user_name = Column(Text)
    user_email = Column(Text)
    feedback_text = Column(Text)
    feedback_rating = Column(Float)
    channel = Column(Text)
    intent_name = Column(Text)
    intent_confidence = Column(Float)
    used_gemini = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

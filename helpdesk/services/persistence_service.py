"""Best-effort persistence of conversation, FAQ and feedback records.

Nothing in here raises to the caller: a failed insert must never abort the
reply to the end user.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from helpdesk.database import SessionFactory
from helpdesk.logging_config import get_logger
from helpdesk.models import ConversationRecord, FaqRecord, FeedbackRecord
from helpdesk.services.result import Result

logger = get_logger("persistence")

RECENT_CONVERSATIONS_LIMIT = 100
ANALYTICS_SAMPLE_LIMIT = 500


class RecordTable(str, Enum):
    CONVERSATIONS = "conversations"
    FAQS = "faqs"
    FEEDBACK = "feedback"


TABLE_MODELS = {
    RecordTable.CONVERSATIONS: ConversationRecord,
    RecordTable.FAQS: FaqRecord,
    RecordTable.FEEDBACK: FeedbackRecord,
}


def sanitize_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Replace None and blank strings with an explicit None."""
    sanitized: dict[str, Any] = {}
    for key, value in record.items():
        if isinstance(value, str) and not value.strip():
            sanitized[key] = None
        else:
            sanitized[key] = value
    return sanitized


def row_to_dict(row: Any) -> dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _close_session(db: Any) -> None:
    try:
        db.close()
    except SQLAlchemyError as exc:
        logger.error("Failed to close session", extra={"context": {"error_code": "db_error", "error": str(exc)}})


@dataclass
class OverviewData:
    totals: dict[str, int]
    recent_conversations: list[dict[str, Any]] = field(default_factory=list)
    conversation_sample: list[dict[str, Any]] = field(default_factory=list)
    faq_sample: list[dict[str, Any]] = field(default_factory=list)


class PersistenceGateway:
    def __init__(self, session_factory: Optional[SessionFactory]):
        self._session_factory = session_factory

    @property
    def configured(self) -> bool:
        return self._session_factory is not None

    @property
    def session_factory(self) -> Optional[SessionFactory]:
        return self._session_factory

    async def save(self, table: RecordTable, record: Mapping[str, Any]) -> Result[str]:
        """Insert one record off the event loop."""
        return await asyncio.to_thread(self.save_sync, table, record)

    def save_sync(self, table: RecordTable, record: Mapping[str, Any]) -> Result[str]:
        if self._session_factory is None:
            logger.warning(
                "Skipping insert because the database is not configured",
                extra={"context": {"table": table.value}},
            )
            return Result.skipped("database not configured")

        model = TABLE_MODELS[table]
        sanitized = sanitize_record(record)
        db = self._session_factory()
        try:
            row = model(**sanitized)
            db.add(row)
            db.commit()
            record_id = str(row.id)
        except Exception as exc:
            error_code = "db_error" if isinstance(exc, SQLAlchemyError) else "invalid_record"
            try:
                db.rollback()
            except SQLAlchemyError as rollback_exc:
                logger.error(
                    "Rollback failed",
                    extra={"context": {"table": table.value, "error_code": "db_error", "error": str(rollback_exc)}},
                )
            logger.error(
                "Failed to store record",
                extra={"context": {"table": table.value, "error_code": error_code, "error": str(exc)}},
            )
            return Result.failure(str(exc), error_code)
        finally:
            _close_session(db)

        logger.info("Record stored", extra={"context": {"table": table.value, "id": record_id}})
        return Result.success(record_id)

    async def fetch_overview_data(self) -> Result[OverviewData]:
        return await asyncio.to_thread(self.fetch_overview_data_sync)

    def fetch_overview_data_sync(self) -> Result[OverviewData]:
        if self._session_factory is None:
            return Result.skipped("database not configured")

        db = self._session_factory()
        try:
            totals = {
                table.value: db.scalar(select(func.count()).select_from(model)) or 0
                for table, model in TABLE_MODELS.items()
            }
            conversation_sample = (
                db.execute(
                    select(ConversationRecord)
                    .order_by(ConversationRecord.created_at.desc())
                    .limit(ANALYTICS_SAMPLE_LIMIT)
                )
                .scalars()
                .all()
            )
            faq_sample = (
                db.execute(select(FaqRecord).order_by(FaqRecord.created_at.desc()).limit(ANALYTICS_SAMPLE_LIMIT))
                .scalars()
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to read overview data",
                extra={"context": {"error_code": "db_error", "error": str(exc)}},
            )
            return Result.failure(str(exc), "db_error")
        finally:
            _close_session(db)

        conversations = [row_to_dict(row) for row in conversation_sample]
        return Result.success(
            OverviewData(
                totals=totals,
                recent_conversations=conversations[:RECENT_CONVERSATIONS_LIMIT],
                conversation_sample=conversations,
                faq_sample=[row_to_dict(row) for row in faq_sample],
            )
        )

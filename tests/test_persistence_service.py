import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import UUID

from sqlalchemy.exc import OperationalError

from helpdesk.models import ConversationRecord, FaqRecord, FeedbackRecord
from helpdesk.services.persistence_service import (
    PersistenceGateway,
    RecordTable,
    row_to_dict,
    sanitize_record,
)


class TestSanitizeRecord:
    def test_blank_strings_become_none(self):
        assert sanitize_record({"user_name": "", "user_email": "   ", "channel": "web"}) == {
            "user_name": None,
            "user_email": None,
            "channel": "web",
        }

    def test_non_string_values_untouched(self):
        record = {"feedback_rating": 0.0, "used_gemini": False, "intent_confidence": None}
        assert sanitize_record(record) == record

    def test_idempotent(self):
        record = {"user_name": " ", "user_message": "hi"}
        assert sanitize_record(sanitize_record(record)) == sanitize_record(record)

    def test_input_not_mutated(self):
        record = {"user_name": ""}
        sanitize_record(record)
        assert record == {"user_name": ""}


class TestUnconfiguredGateway:
    def test_save_is_skipped(self):
        gateway = PersistenceGateway(None)

        result = asyncio.run(gateway.save(RecordTable.CONVERSATIONS, {"session_id": "s1"}))

        assert gateway.configured is False
        assert result.is_skipped is True

    def test_overview_is_skipped(self):
        result = PersistenceGateway(None).fetch_overview_data_sync()
        assert result.is_skipped is True


class TestSaveRecords:
    def test_conversation_stored_with_defaults(self, sqlite_session_factory):
        gateway = PersistenceGateway(sqlite_session_factory)

        result = asyncio.run(
            gateway.save(
                RecordTable.CONVERSATIONS,
                {"session_id": "s1", "intent_name": "Customer Support", "user_name": "", "channel": "dialogflow"},
            )
        )

        assert result.ok is True
        with sqlite_session_factory() as db:
            row = db.get(ConversationRecord, UUID(result.value))
            assert row.session_id == "s1"
            assert row.user_name is None
            assert row.used_gemini is False
            assert row.created_at is not None

    def test_faq_and_feedback_tables(self, sqlite_session_factory):
        gateway = PersistenceGateway(sqlite_session_factory)

        faq = gateway.save_sync(RecordTable.FAQS, {"question_text": "Q?", "answer_text": "A.", "used_gemini": True})
        feedback = gateway.save_sync(RecordTable.FEEDBACK, {"feedback_text": "Great", "feedback_rating": 5.0})

        assert faq.ok and feedback.ok
        with sqlite_session_factory() as db:
            assert db.get(FaqRecord, UUID(faq.value)).used_gemini is True
            assert db.get(FeedbackRecord, UUID(feedback.value)).feedback_rating == 5.0

    def test_unknown_field_is_reported_not_raised(self, sqlite_session_factory):
        gateway = PersistenceGateway(sqlite_session_factory)

        result = gateway.save_sync(RecordTable.FEEDBACK, {"no_such_column": "x"})

        assert result.ok is False
        assert result.error_code == "invalid_record"

    def test_database_error_rolls_back(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("connection refused"))
        gateway = PersistenceGateway(lambda: db)

        result = gateway.save_sync(RecordTable.CONVERSATIONS, {"session_id": "s1"})

        assert result.ok is False
        assert result.error_code == "db_error"
        db.rollback.assert_called_once()
        db.close.assert_called_once()

    def test_rollback_failure_still_returns_result(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("server closed the connection"))
        db.rollback.side_effect = OperationalError("ROLLBACK", {}, Exception("server closed the connection"))
        gateway = PersistenceGateway(lambda: db)

        result = asyncio.run(gateway.save(RecordTable.CONVERSATIONS, {"session_id": "s1"}))

        assert result.ok is False
        assert result.error_code == "db_error"
        db.close.assert_called_once()

    def test_close_failure_after_insert_is_logged_not_raised(self):
        db = MagicMock()
        db.close.side_effect = OperationalError("CLOSE", {}, Exception("connection reset"))
        gateway = PersistenceGateway(lambda: db)

        result = gateway.save_sync(RecordTable.FEEDBACK, {"feedback_text": "ok"})

        assert result.ok is True


class TestOverviewData:
    def test_counts_and_recent_ordering(self, sqlite_session_factory):
        now = datetime.now(timezone.utc)
        with sqlite_session_factory() as db:
            db.add_all(
                [
                    ConversationRecord(session_id="old", created_at=now - timedelta(hours=1)),
                    ConversationRecord(session_id="new", created_at=now),
                    FaqRecord(question_text="Q?"),
                ]
            )
            db.commit()

        result = asyncio.run(PersistenceGateway(sqlite_session_factory).fetch_overview_data())

        assert result.ok is True
        assert result.value.totals == {"conversations": 2, "faqs": 1, "feedback": 0}
        assert [row["session_id"] for row in result.value.recent_conversations] == ["new", "old"]
        assert result.value.faq_sample[0]["question_text"] == "Q?"

    def test_row_to_dict_has_every_column(self, sqlite_session_factory):
        with sqlite_session_factory() as db:
            row = FeedbackRecord(feedback_text="ok")
            db.add(row)
            db.commit()
            data = row_to_dict(row)

        assert data["feedback_text"] == "ok"
        assert set(data) == {column.name for column in FeedbackRecord.__table__.columns}

    def test_read_error_is_reported(self):
        db = MagicMock()
        db.scalar.side_effect = OperationalError("SELECT", {}, Exception("down"))

        result = PersistenceGateway(lambda: db).fetch_overview_data_sync()

        assert result.ok is False
        assert result.error_code == "db_error"
        db.close.assert_called_once()

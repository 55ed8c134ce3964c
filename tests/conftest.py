from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.database import Base
from helpdesk.services.ai_service import GenerativeFallback
from helpdesk.services.flow_service import FlowDependencies, Turn
from helpdesk.services.persistence_service import PersistenceGateway
from helpdesk.services.result import Result
from helpdesk.services.session_state import SessionStateTracker

GENERATED_TEXT = "Generated answer from the model."


@pytest.fixture
def tracker():
    return SessionStateTracker()


@pytest.fixture
def gateway():
    """Gateway double recording every save call."""
    mock = Mock(spec=PersistenceGateway)
    mock.save = AsyncMock(return_value=Result.success("record-id"))
    return mock


@pytest.fixture
def fallback():
    mock = Mock(spec=GenerativeFallback)
    mock.generate = AsyncMock(return_value=GENERATED_TEXT)
    return mock


@pytest.fixture
def flow_deps(tracker, gateway, fallback):
    return FlowDependencies(tracker=tracker, gateway=gateway, fallback=fallback, confidence_threshold=0.6)


@pytest.fixture
def make_turn():
    def _make_turn(
        query_text="",
        intent="Default Fallback Intent",
        parameters=None,
        session_id="projects/demo/agent/sessions/abc-123",
        channel="dialogflow",
        confidence=None,
    ):
        return Turn(
            detected_intent=intent,
            query_text=query_text,
            parameters=parameters or {},
            session_id=session_id,
            channel=channel,
            confidence=confidence,
        )

    return _make_turn


@pytest.fixture
def sqlite_session_factory():
    """In-memory SQLite shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def mock_env(monkeypatch):
    """Set test environment variables."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

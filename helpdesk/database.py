from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from helpdesk.config import Settings
from helpdesk.logging_config import get_logger

logger = get_logger("database")

Base = declarative_base()

SessionFactory = Callable[[], Session]


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite needs cross-thread access for worker-thread inserts."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(settings: Settings) -> Optional[SessionFactory]:
    """Return a session factory, or None when no usable database is configured."""
    if not settings.database_configured:
        logger.warning("DATABASE_URL is not set; record persistence will be skipped")
        return None

    try:
        engine = build_engine(settings.database_url.strip())
    except Exception as exc:
        logger.error(
            "Could not create database engine; record persistence will be skipped",
            extra={"context": {"error_code": "db_config", "error": str(exc)}},
        )
        return None

    logger.info("Database engine initialised", extra={"context": {"dialect": engine.dialect.name}})
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def create_tables(factory: SessionFactory) -> None:
    """Create the record tables if they do not exist yet."""
    import helpdesk.models  # noqa: F401  registers the tables on Base.metadata

    with factory() as db:
        Base.metadata.create_all(bind=db.get_bind())

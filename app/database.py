"""
Database utilities and SQLAlchemy session management.
"""
import json
import logging

from sqlalchemy import JSON, String, create_engine, event
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from config import get_settings

logger = logging.getLogger(__name__)

# Widest integer every supported store accepts as a bound parameter.
INTEGER_MIN = -(2 ** 63)
INTEGER_MAX = 2 ** 63 - 1


def _json_serializer(value):
    return json.dumps(value, ensure_ascii=False)


def build_engine(database_url: str) -> Engine:
    """Create an engine for the given URL with the per-dialect options the app needs."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Required for SQLite when used across FastAPI's threadpool.
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
        json_serializer=_json_serializer,
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class StringList(TypeDecorator):
    """An ordered list of strings: a native array on PostgreSQL, JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(ARRAY(String))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return []
        return list(value)

    def process_result_value(self, value, dialect):
        return list(value or [])


def get_db():
    """Yield a session for one request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Import models and create tables. Invoked once during startup."""
    from models import models  # noqa: F401  (side-effect import)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")

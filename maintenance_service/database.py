import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from maintenance_service.config import settings

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE / SET NULL unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def make_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine; SQLite connections may be shared across threads."""
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", settings.sqlite_timeout)
        kwargs["connect_args"] = connect_args
    return create_engine(database_url, echo=settings.debug, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


# Database engine
engine = make_engine(settings.database_url)

# Session factory
SessionLocal = make_session_factory(engine)

# Declarative base for the ORM models
Base = declarative_base()


# Session dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Storage handle for services that manage their own units of work."""
    return SessionLocal


def init_db(bind: Engine = None):
    """Create every table that does not exist yet."""
    # Register all models with Base before create_all
    from maintenance_service.models import catalog, inspection, site, user  # noqa: F401

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    logger.info(f"Database schema ready at {target.url}")

"""Database connection management utilities."""
import logging
import os
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool
from config.settings import settings

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine = None
_session_factory = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url):
    """Create an engine with pooling suited to the backend behind ``db_url``."""
    if db_url.startswith("sqlite"):
        engine_kwargs = {
            "connect_args": {"check_same_thread": False},
            "echo": settings.database.echo,
        }
        if ":memory:" in db_url:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        else:
            db_path = db_url.split("///", 1)[-1]
            db_dir = os.path.dirname(db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)

        engine = create_engine(db_url, **engine_kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        logger.info("Database engine initialized for SQLite")
        return engine

    engine = create_engine(
        db_url,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=300,
        pool_timeout=10,
        echo=settings.database.echo,
    )
    logger.info(
        f"Database engine initialized with connection pooling: "
        f"pool_size={settings.database.pool_size}, max_overflow={settings.database.max_overflow}"
    )
    return engine


def get_engine():
    """Get or create the global database engine."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database.url)
    return _engine


def get_session_factory():
    """Get or create the global session factory."""
    global _session_factory
    if _session_factory is None:
        engine = get_engine()
        _session_factory = scoped_session(sessionmaker(bind=engine, expire_on_commit=False))
    return _session_factory


def get_session():
    """Get a new database session."""
    factory = get_session_factory()
    return factory()


def close_session(session):
    """Close a database session properly."""
    try:
        session.close()
    except Exception as e:
        logger.warning(f"Error closing session: {e}")


@contextmanager
def session_scope():
    """Provide a transactional scope around a series of operations.

    Usage:
        with session_scope() as session:
            # use session here
            # automatically commits on success, rolls back on error
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        close_session(session)


def init_database():
    """Create all tables that do not exist yet."""
    from src.models import Base

    engine = get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database tables created/verified")


def reset_engine():
    """Dispose the engine and session factory so the next call rebuilds them."""
    global _engine, _session_factory
    if _session_factory is not None:
        _session_factory.remove()
        _session_factory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None

"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with a test
fallback (SQLite in-memory) and exposes session helpers with an explicit
lifecycle: ``get_db`` for dependency-style callers and ``session_scope``
for scripts.
"""
import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = "./schemes.db"
MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _get_database_url() -> str:
    # If DATABASE_URL is explicitly set, use it
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")
    components = [db_user, db_password, db_host, db_port, db_name]

    # Partial Postgres configuration is a mistake, not a reason to fall back
    if any(components):
        if not all(components):
            missing = []
            if not db_user: missing.append("POSTGRES_USER")
            if not db_password: missing.append("POSTGRES_PASSWORD")
            if not db_host: missing.append("POSTGRES_HOST")
            if not db_port: missing.append("POSTGRES_PORT")
            if not db_name: missing.append("POSTGRES_DB")
            raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")
        return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    path = os.getenv("SCHEMES_DB_PATH", DEFAULT_SQLITE_PATH)
    return f"sqlite:///{path}"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so module import
    during collection would miss it; pytest already being in ``sys.modules``
    covers that window. ``PYTEST_RUNNING=1`` forces detection.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    if "pytest" in sys.modules:
        return True
    return False


def _resolve_url() -> str:
    """Pick the URL for the module-level engine.

    1. SCHEMES_TEST_DB, when set.
    2. In-memory SQLite when running under pytest.
    3. The regular environment configuration.
    """
    explicit_test_db = os.getenv("SCHEMES_TEST_DB")
    if explicit_test_db:
        return explicit_test_db
    if _is_pytest_runtime():
        return MEMORY_URL
    return _get_database_url()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; cascades on steps depend on it
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    SQLite engines are made thread-tolerant and get foreign keys switched
    on for every new connection. In-memory databases share one connection
    through ``StaticPool`` so the schema survives across sessions.
    """
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
    eng = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    logger.debug("database engine created: dialect=%s", eng.dialect.name)
    return eng


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


DATABASE_URL = _resolve_url()

engine = create_db_engine(DATABASE_URL)

SessionLocal = make_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the ``schemes`` and ``steps`` tables if they do not exist."""
    from scheme_service.db import models  # local import to avoid circular import at module load

    models.Base.metadata.create_all(bind=bind or engine)


def drop_db(bind: Optional[Engine] = None) -> None:
    from scheme_service.db import models

    models.Base.metadata.drop_all(bind=bind or engine)


def get_db() -> Iterator[Session]:
    """Yield a session and close it when the caller is done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """Scoped session: rolled back on error, always closed.

    Repository operations commit their own writes, so nothing is committed
    here on a clean exit.
    """
    db = (factory or SessionLocal)()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

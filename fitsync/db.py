import logging
import threading
from typing import Dict, Iterator, Optional, Set

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from . import config

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def create_db_engine(url: str, pool_size: int = config.DB_POOL_SIZE) -> Engine:
    """Build an engine with a bounded pool; SQLite gets foreign keys turned on."""
    kwargs = {"echo": config.SQL_ECHO, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_size"] = pool_size
        kwargs["max_overflow"] = 0

    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, _):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return engine


def init_db(url: Optional[str] = None) -> Engine:
    global _engine
    if _engine is not None:
        return _engine

    from . import models  # noqa: F401  registers table metadata

    target = url or config.DATABASE_URL
    engine = create_db_engine(target)
    SQLModel.metadata.create_all(engine)
    _engine = engine
    logger.info("Database ready (%s, pool_size=%s)", engine.url.render_as_string(hide_password=True), config.DB_POOL_SIZE)
    return engine


def close_db() -> None:
    global _engine
    if _engine is None:
        return
    _engine.dispose()
    _engine = None
    logger.info("Database pool closed")


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database engine not initialized")
    return _engine


def get_session() -> Iterator[Session]:
    with Session(get_engine()) as session:
        yield session


# ---- optional columns ----
# Older stores may lack columns added after the first release. The first
# statement that touches one fails; we record that and stop sending it.

MISSING_COLUMN_MARKERS = (
    "no such column",
    "has no column named",
    "does not exist",
    "unknown column",
    "invalid identifier",
)

_missing_columns: Dict[str, Set[str]] = {}
_missing_lock = threading.Lock()


def _bind_key(bind: Engine) -> str:
    return bind.url.render_as_string(hide_password=True)


def missing_columns(bind: Engine) -> Set[str]:
    with _missing_lock:
        return set(_missing_columns.get(_bind_key(bind), ()))


def mark_column_missing(bind: Engine, column: str) -> None:
    with _missing_lock:
        _missing_columns.setdefault(_bind_key(bind), set()).add(column)
    logger.warning("Column %s not found in %s, falling back to statements without it", column, bind.url.database)


def reset_column_cache() -> None:
    with _missing_lock:
        _missing_columns.clear()


def is_missing_column(exc: DBAPIError, column: str) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return column.lower() in message and any(marker in message for marker in MISSING_COLUMN_MARKERS)


def find_missing_column(exc: DBAPIError, candidates) -> Optional[str]:
    for column in candidates:
        if is_missing_column(exc, column):
            return column
    return None

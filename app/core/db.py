# app/core/db.py
from __future__ import annotations
import threading
import uuid
from contextlib import contextmanager
from psycopg2.pool import ThreadedConnectionPool
from core.config import Settings, get_settings

_pool: ThreadedConnectionPool | None = None
_settings: Settings | None = None
_lock = threading.Lock()


def configure(settings: Settings) -> None:
    """Bind the pool to explicit settings. The pool itself opens on first use."""
    global _settings
    _settings = settings


def _get_pool() -> ThreadedConnectionPool:
    global _pool
    if _pool is None:
        with _lock:
            if _pool is None:
                s = _settings or get_settings()
                _pool = ThreadedConnectionPool(
                    s.PG_POOL_MIN, s.PG_POOL_MAX,
                    host=s.PG_HOST,
                    port=s.PG_PORT,
                    dbname=s.PG_DB,
                    user=s.PG_USER,
                    password=s.PG_PASSWORD,
                    sslmode=s.PG_SSLMODE,
                )
    return _pool


def close_pool() -> None:
    global _pool
    with _lock:
        if _pool is not None:
            _pool.closeall()
            _pool = None


@contextmanager
def get_conn():
    """Borrow a pooled connection; commit on success, roll back on error."""
    pool = _get_pool()
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


def is_uuid(value) -> bool:
    """True when `value` can be bound to a uuid column without a DataError."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def database_url(settings: Settings) -> str:
    return (
        f"postgresql+psycopg2://{settings.PG_USER}:{settings.PG_PASSWORD}"
        f"@{settings.PG_HOST}:{settings.PG_PORT}/{settings.PG_DB}?sslmode={settings.PG_SSLMODE}"
    )


def create_schema(settings: Settings) -> None:
    """Create all tables described in domain.sqlalchemy_models (idempotent)."""
    from sqlalchemy import create_engine
    from domain.sqlalchemy_models import Base

    engine = create_engine(database_url(settings))
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()


if __name__ == "__main__":
    create_schema(get_settings())

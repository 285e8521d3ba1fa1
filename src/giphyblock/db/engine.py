"""Async engine and session factory for the site database."""

import os

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def _engine_options(url: URL) -> dict:
    if _is_sqlite(url):
        return {"connect_args": {"timeout": 30}}
    return {
        "pool_size": int(os.environ.get("GIPHYBLOCK_DB_POOL_SIZE", "5")),
        "max_overflow": int(os.environ.get("GIPHYBLOCK_DB_MAX_OVERFLOW", "10")),
        "pool_pre_ping": True,
    }


def _sqlite_pragmas(url: URL) -> list[str]:
    pragmas = ["PRAGMA busy_timeout=5000"]
    # WAL needs a database file
    if url.database not in (None, "", ":memory:"):
        pragmas.insert(0, "PRAGMA journal_mode=WAL")
    return pragmas


def init_engine(database_url: str) -> AsyncEngine:
    global _engine, _session_factory

    url = make_url(database_url)
    _engine = create_async_engine(url, **_engine_options(url))

    if _is_sqlite(url):
        pragmas = _sqlite_pragmas(url)

        @event.listens_for(_engine.sync_engine, "connect")
        def _on_connect(dbapi_conn, _connection_record):
            cursor = dbapi_conn.cursor()
            for pragma in pragmas:
                cursor.execute(pragma)
            cursor.close()

    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    return _engine


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() first.")
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections.  The engine reconnects on next use."""
    if _engine is not None:
        await _engine.dispose()

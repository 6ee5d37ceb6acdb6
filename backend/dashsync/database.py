"""Async engine construction and the declarative base."""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, pool_size: int = 10) -> AsyncEngine:
    """Create the async engine for ``database_url``.

    Every statement the reconciliation engine issues runs in its own
    short transaction, so the pool only has to cover one batch of
    concurrent row writes per request.
    """
    if database_url.startswith("sqlite"):
        # One connection per checkout; SQLite serialises writers itself.
        engine = create_async_engine(
            database_url, poolclass=NullPool, connect_args={"timeout": 30}
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=0,
            pool_pre_ping=True,
        )
    logger.info("Database engine created (dialect=%s)", engine.dialect.name)
    return engine

"""
Database session management for the RIS record store.

The indexer only reads hierarchy entities. Every run gets one short
READ ONLY transaction; the connection goes back to the pool when the run
ends.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ris_search.core.config import settings
from ris_search.models.hierarchy import SCHEMA

logger = logging.getLogger(__name__)

engine: AsyncEngine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    pool_recycle=1800,
    echo=settings.db_echo_sql,
)

# ORM rows are read after the transaction closes
StoreSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_store_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Read-only session scoped to one indexing run.

        async with get_store_session() as db:
            store = HierarchyRecordStore(db)
    """
    async with StoreSessionLocal() as session:
        async with session.begin():
            await session.execute(text("SET TRANSACTION READ ONLY"))
            yield session


async def check_db_health() -> dict:
    """Ping the database and count the hierarchy tables it exposes."""
    try:
        async with engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT count(*) FROM information_schema.tables "
                    "WHERE table_schema = :schema"
                ),
                {"schema": SCHEMA},
            )
            tables = result.scalar_one()
    except SQLAlchemyError as exc:
        logger.error("Record store health check failed | error=%s", exc)
        return {"status": "error", "detail": str(exc)}
    return {"status": "ok", "tables": tables}

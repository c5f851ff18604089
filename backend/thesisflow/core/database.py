import logging
from typing import AsyncGenerator
from fastapi import HTTPException
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from thesisflow.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

database_url = settings.sqlalchemy_database_url
is_sqlite = database_url.startswith("sqlite")

if is_sqlite:
    # One connection per session; the embedded file handles its own locking.
    engine = create_async_engine(
        database_url,
        echo=False,
        poolclass=NullPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # FK cascades are off by default in SQLite
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=300,
    )

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
        except Exception as e:
            if not isinstance(e, HTTPException):
                logger.error("Database session error: %s", str(e), exc_info=True)
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables; a failure here aborts startup."""
    # Import all models to register them with Base
    from thesisflow import models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception:
        logger.error("Could not initialize database at %s", engine.url.render_as_string(hide_password=True), exc_info=True)
        raise
    logger.info("Database tables ready (%s)", engine.url.get_backend_name())


async def drop_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

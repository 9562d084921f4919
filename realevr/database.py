"""
Database engine and session management for the relational storage backend.
Only used when DATABASE_URL is configured; the JSON file store needs none of this.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy import Integer, text
import asyncio
import logging

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all database models.
    Uses integer identifiers allocated by the database.
    """

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}(id={self.id})>"


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine with pool settings suited to the driver.

    Args:
        database_url: Async SQLAlchemy database URL
        echo: Log emitted SQL

    Returns:
        Configured AsyncEngine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases only live as long as their single connection
        if ":memory:" in database_url or database_url.rstrip("/").endswith("aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(database_url, echo=echo, **kwargs)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=30,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the async session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def wait_for_database(engine: AsyncEngine, retries: int = 5, initial_delay: float = 1.0) -> None:
    """
    Verify database connectivity, retrying with exponential backoff.

    Args:
        engine: Engine to test
        retries: Maximum number of connection attempts
        initial_delay: Delay in seconds before the second attempt, doubled each time

    Raises:
        SQLAlchemyError: If every attempt fails
    """
    for attempt in range(retries):
        try:
            logger.info(f"Attempting to connect to database (attempt {attempt + 1}/{retries})...")
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection established successfully")
            return
        except (OSError, SQLAlchemyError) as e:
            logger.error(f"Database connection error (attempt {attempt + 1}/{retries}): {e}")
            if attempt >= retries - 1:
                logger.error("Maximum retry attempts reached")
                raise
            delay = initial_delay * (2 ** attempt)
            logger.info(f"Retrying in {delay:.1f}s...")
            await asyncio.sleep(delay)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")


"""Database engine, session factory and request session dependency."""
import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.config import Settings, settings as default_settings
from app.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def setup_sql_logging(config: Settings) -> None:
    """
    Configure SQLAlchemy SQL statement logging.

    Set SQL_ECHO=true in .env to enable SQL logging.
    """
    if config.sql_echo:
        log_level = getattr(logging, config.sql_log_level.upper(), logging.INFO)
        logging.getLogger('sqlalchemy.engine').setLevel(log_level)
        logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)
        logger.info(f"SQL logging enabled at {config.sql_log_level} level")
    else:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
        logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)


class Database:
    """
    Explicit handle around the async engine and its session factory.

    Created once at application startup and disposed at shutdown; components
    receive it at construction time instead of importing a module-level pool.
    """

    def __init__(self, config: Optional[Settings] = None, engine: Optional[AsyncEngine] = None):
        self.config = config or default_settings
        setup_sql_logging(self.config)
        self.engine = engine or create_async_engine(
            self.config.database_url,
            echo=self.config.sql_echo,
            echo_pool=False,
            pool_size=self.config.db_pool_size,
            max_overflow=self.config.db_max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=30,
        )
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session; use as `async with database.session() as session`."""
        return self.session_maker()

    async def connect(self) -> None:
        """Verify connectivity and that the pgvector extension is installed."""
        try:
            async with self.engine.connect() as conn:
                logger.info("Testing database connection...")
                result = await conn.execute(text("SELECT 1"))
                result.fetchone()
                vector_ext = await conn.execute(
                    text("SELECT 1 FROM pg_extension WHERE extname = 'vector'")
                )
                if vector_ext.fetchone() is None:
                    logger.warning(
                        "pgvector extension is not installed; vector search will fall back to keyword search"
                    )
            logger.info("Database connection established successfully")
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}", extra={"error": str(e)})
            raise

    async def ping(self) -> bool:
        """Cheap connectivity check used by the health endpoint."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}", extra={"error": str(e)})
            return False

    async def close(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")


def get_database(request: Request) -> Database:
    """Dependency returning the application's database handle."""
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session."""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

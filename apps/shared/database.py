"""
Database configuration and session management

This module provides the async SQLAlchemy setup for database connectivity.
NO models are defined here - this is just infrastructure.
"""

import os
import logging
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)

# Get database URL from environment variable
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+asyncpg://backend_user:changeme@db:5432/backend_db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Create engine
# Using NullPool for better compatibility with containerized environments
engine = create_async_engine(
    DATABASE_URL,
    poolclass=NullPool,
    echo=SQL_ECHO,
)

# Session factory. Objects stay loaded after commit so responses can be
# serialized without another round trip.
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

# Base class for ORM models
Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for database sessions
    Usage in FastAPI endpoints:

    @app.get("/endpoint")
    async def endpoint(db: AsyncSession = Depends(get_db)):
        # use db here
        pass

    Anything not committed when the request ends is rolled back.
    """
    async with SessionLocal() as db:
        yield db


async def init_db() -> None:
    """Create all tables registered on Base."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def check_db_connection() -> bool:
    """
    Test database connectivity
    Returns True if connection successful, False otherwise
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {type(e).__name__}")
        return False

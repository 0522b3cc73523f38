from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import NullPool
from typing import Tuple

from .models import Base


def create_session_factory(
    database_url: str,
    echo: bool = False,
) -> Tuple[AsyncEngine, async_sessionmaker]:
    """Create the async engine and session factory for the job database."""
    connect_args = {}
    if database_url.startswith("postgresql+asyncpg"):
        connect_args = {"server_settings": {"application_name": "document-processing-worker"}}

    engine = create_async_engine(
        database_url,
        echo=echo,
        poolclass=NullPool,
        connect_args=connect_args,
    )

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory


async def init_db(engine: AsyncEngine):
    """Initialize database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

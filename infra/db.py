from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import Settings


def create_temp_storage_engine(settings: Settings) -> AsyncEngine:
    """Асинхронный движок SQLAlchemy для временного хранилища."""
    return create_async_engine(
        settings.database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # один handler = одна сессия на прогон
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
    )

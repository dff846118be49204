from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from .settings import settings
from .store import Store


def make_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


async_engine: AsyncEngine = make_engine(settings.DATABASE_URL)
admin_engine: AsyncEngine = (
    async_engine
    if settings.ELEVATED_DATABASE_URL == settings.DATABASE_URL
    else make_engine(settings.ELEVATED_DATABASE_URL)
)

AsyncSessionLocal = make_session_factory(async_engine)
AdminSessionLocal = make_session_factory(admin_engine)

store = Store(
    restricted=AsyncSessionLocal,
    elevated=AdminSessionLocal,
    timeout=settings.STORE_TIMEOUT_SECONDS,
)


async def get_store() -> Store:
    return store


async def dispose_engines():
    await async_engine.dispose()
    if admin_engine is not async_engine:
        await admin_engine.dispose()


Base = declarative_base()

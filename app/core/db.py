from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.core.config import settings


def to_async_url(database_url: str) -> tuple[str, dict]:
    """Return (async url, connect_args) for the configured database.

    asyncpg does not accept psycopg params like sslmode/channel_binding, so plain
    postgresql URLs get the asyncpg scheme, lose those params and enable SSL via
    connect_args instead.
    """
    parsed = urlparse(database_url)
    if parsed.scheme != "postgresql":
        return database_url, {}
    query = parse_qs(parsed.query, keep_blank_values=True)
    query.pop("sslmode", None)
    query.pop("channel_binding", None)
    new_query = urlencode(query, doseq=True)
    url = urlunparse(
        ("postgresql+asyncpg", parsed.netloc, parsed.path, parsed.params, new_query, parsed.fragment)
    )
    return url, {"ssl": True}


def build_engine(database_url: str) -> AsyncEngine:
    url, connect_args = to_async_url(database_url)
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.env == "development", connect_args=connect_args)
    return create_async_engine(
        url,
        echo=settings.env == "development",
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args=connect_args,
    )


engine = build_engine(settings.database_url)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables if using create_all; prefer Alembic in production."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

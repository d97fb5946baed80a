import ssl

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from agentaria.config.settings import settings


def _connect_args() -> dict:
    # Hosted Postgres (Supabase / Neon) requires TLS
    if settings.DATABASE_SSL:
        return {"ssl": ssl.create_default_context()}
    return {}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    connect_args=_connect_args(),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

import json

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from conduit.config import settings
from conduit.middleware import install_query_counter


def json_serializer(value) -> str:
    # Keep non-ASCII tag text readable so substring filters match it.
    return json.dumps(value, ensure_ascii=False)


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    json_serializer=json_serializer,
)

install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """
    Yield one session per request.

    The request is the unit of work: everything the service layer flushed
    is committed together, or rolled back together when anything raises.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

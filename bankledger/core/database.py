from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import Optional

from bankledger.core.config import settings

Base = declarative_base()


def build_async_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """Create the async engine for the ledger store"""
    url = database_url or settings.DATABASE_URL
    options = {
        "echo": settings.DEBUG if echo is None else echo,
        "future": True,
        "pool_pre_ping": True,
    }

    if url.startswith("sqlite"):
        # SQLite waits on locked databases instead of failing immediately
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS
        }
    else:
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW

    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory; every atomic unit gets its own session"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )

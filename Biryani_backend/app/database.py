import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.migrations import run_migrations

MEMORY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

Base = declarative_base()
logger = logging.getLogger("biryani.database")


def database_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{path}"


def build_engine(path: str, echo: bool = False) -> AsyncEngine:
    if path == ":memory:":
        # 内存库只有一个连接，否则每个连接各是一份空库
        return create_async_engine(
            MEMORY_DATABASE_URL,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(database_url(path), echo=echo)


async def create_tables(engine: AsyncEngine):
    # 注册所有表
    import models.user  # noqa: F401
    import models.post  # noqa: F401
    import models.report  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await run_migrations(conn)


async def open_database(path: str, echo: bool = False) -> AsyncEngine:
    """Open the SQLite file at ``path`` and make sure the schema exists.

    When the file cannot be opened the application keeps running on an
    in-memory database; when the schema cannot be created the engine is
    still returned and store operations degrade.
    """
    engine = build_engine(path, echo=echo)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("DB_OPEN path=%s", path)
    except (SQLAlchemyError, OSError) as exc:
        logger.error("DB_OPEN_FAILED path=%s error=%s, falling back to in-memory database", path, exc)
        await engine.dispose()
        engine = build_engine(":memory:", echo=echo)
    try:
        await create_tables(engine)
    except SQLAlchemyError as exc:
        logger.error("DB_SCHEMA_FAILED path=%s error=%s", path, exc)
    return engine

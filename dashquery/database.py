from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from dashquery.config import get_settings
from dashquery.dialect import StoreDialect

_async_engine = None
_sync_engine = None
_AsyncSessionLocal = None
_sql_store = None


def _async_database_url(database_url: str) -> str:
    """Swap the sync driver of ``database_url`` for its async counterpart."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        url = url.set(drivername="sqlite+aiosqlite")
    elif url.get_backend_name() == "postgresql":
        url = url.set(drivername="postgresql+asyncpg")
    return url.render_as_string(hide_password=False)


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN itself so pysqlite savepoints nest correctly."""

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _get_engines():
    """Lazy initialization of database engines."""
    global _async_engine, _sync_engine, _AsyncSessionLocal

    if _async_engine is None:
        settings = get_settings()

        if not settings.database_url:
            return None, None, None

        _async_engine = create_async_engine(
            _async_database_url(settings.database_url),
            echo=settings.database_echo,
            pool_pre_ping=True,
            pool_recycle=300,
        )

        _sync_engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
            pool_recycle=300,
        )
        if _sync_engine.dialect.name == "sqlite":
            enable_sqlite_savepoints(_sync_engine)

        _AsyncSessionLocal = sessionmaker(
            bind=_async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _async_engine, _sync_engine, _AsyncSessionLocal

Base = declarative_base()


class SQLStore:
    """Scoped sessions and transactions against one relational store.

    ``with_session`` is meant for reads; ``with_transaction`` commits when the
    block exits normally and rolls back on every exception, so a multi-step
    mutation is never partially visible.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.dialect = StoreDialect(engine.dialect.name)
        self._session_factory = sessionmaker(
            bind=engine,
            class_=Session,
            expire_on_commit=False,
        )

    @contextmanager
    def with_session(self) -> Generator[Session, None, None]:
        with self._session_factory() as session:
            try:
                yield session
            except Exception:
                session.rollback()
                raise

    @contextmanager
    def with_transaction(self) -> Generator[Session, None, None]:
        with self._session_factory() as session:
            with session.begin():
                yield session


def get_sql_store() -> SQLStore:
    """Return the process-wide SQLStore bound to the configured database."""
    global _sql_store

    if _sql_store is None:
        _, sync_engine, _ = _get_engines()
        if sync_engine is None:
            raise RuntimeError("Database not configured - missing DATABASE_URL")
        _sql_store = SQLStore(sync_engine)

    return _sql_store


async def check_database_connection() -> bool:
    """Check if the database connection is working."""
    try:
        _, _, AsyncSessionLocal = _get_engines()
        if AsyncSessionLocal is None:
            return False

        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            return True
    except Exception:
        return False

async def create_tables():
    """Create all tables if not created"""
    async_engine, _, _ = _get_engines()

    if async_engine is None:
        raise RuntimeError("Database not configured - missing DATABASE_URL")

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

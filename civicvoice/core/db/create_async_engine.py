# Standard library imports
from typing import Any

# Third-party imports
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

# Local application imports
from civicvoice.settings import CommonSettings

SQLITE_BUSY_TIMEOUT_SECONDS = 30.0


def _enable_sqlite_write_serialization(engine: AsyncEngine) -> None:
    """
    Make SQLite behave like a server database under concurrent writers.

    pysqlite/aiosqlite only emit BEGIN lazily before DML, which lets two
    transactions both read and then deadlock when upgrading to a write lock.
    Taking the write lock at BEGIN makes concurrent writers queue on the busy
    timeout instead, so the unique constraint on the upvote ledger is the
    thing that rejects the loser.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:  # noqa: ARG001
        # Take over transaction control from the driver
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_async_engine(settings: CommonSettings) -> AsyncEngine:
    """Create the async engine described by `settings`."""
    url = settings.SQLALCHEMY_ASYNC_DATABASE_URI

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=settings.DATABASE_ECHO,
            connect_args={"timeout": SQLITE_BUSY_TIMEOUT_SECONDS},
        )
        _enable_sqlite_write_serialization(engine)
        return engine

    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

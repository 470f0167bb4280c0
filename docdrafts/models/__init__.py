from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

DraftsBase = declarative_base()

MEMORY_DB_PATH = ":memory:"


def sqlite_engine(db_path: str, timeout: float, pool_size: int | None = None):
    """Build an engine for the drafts database.

    The pysqlite driver's implicit transactions are disabled and every
    transaction is opened explicitly from the ``begin`` hook, so a connection
    can ask for ``BEGIN IMMEDIATE`` through the ``sqlite_begin`` execution
    option and hold the write lock from its first statement.
    """
    url = f"sqlite:///{db_path}"
    options: dict = {
        "connect_args": {"check_same_thread": False, "timeout": timeout},
        "pool_pre_ping": True,
    }
    if db_path == MEMORY_DB_PATH:
        options["poolclass"] = StaticPool
    elif pool_size is not None:
        options["pool_size"] = max(1, pool_size)
        options["max_overflow"] = 0

    engine = create_engine(url, **options)

    @event.listens_for(engine, "connect")
    def _configure_sqlite(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA synchronous=NORMAL;")
        cursor.execute(f"PRAGMA busy_timeout={int(timeout * 1000)};")
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine

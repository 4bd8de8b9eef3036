from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from app.config.settings import Settings

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    """libpq connection string; values are quoted so passwords may contain spaces."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
        application_name="document-recovery",
    )


def init_pool(settings: Settings, wait_timeout_seconds: float = 10.0) -> None:
    """Open the global pool and block until one connection is ready.

    The batch job is sequential, so the pool stays small.

    Raises:
        psycopg_pool.PoolTimeout: if the database is unreachable within the
            timeout (a subclass of ``psycopg.OperationalError``).
    """
    global _pool  # noqa: PLW0603
    _pool = ConnectionPool(
        build_conninfo(settings),
        min_size=1,
        max_size=4,
        name="docrecovery",
        open=True,
    )
    try:
        _pool.wait(timeout=wait_timeout_seconds)
    except Exception:
        close_pool()
        raise


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a pooled connection. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn

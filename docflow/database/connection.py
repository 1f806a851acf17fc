from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from docflow.config.settings import Settings

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_pool: ConnectionPool | None = None


def conninfo_from_settings(settings: Settings) -> str:
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def init_pool(settings: Settings) -> None:
    """Open the shared connection pool and make sure the tables exist."""
    global _pool  # noqa: PLW0603
    _pool = ConnectionPool(conninfo_from_settings(settings), min_size=1, max_size=10, open=True)
    _pool.wait(timeout=10)
    apply_schema()


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


def apply_schema(path: Path = SCHEMA_PATH) -> None:
    """Create the documents/analyses/feedback tables if they are missing."""
    with get_connection() as conn:
        conn.execute(path.read_text(encoding="utf-8"))
        conn.commit()


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn

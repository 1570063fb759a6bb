import time
from contextlib import contextmanager
from typing import Generator

import psycopg2
from psycopg2 import OperationalError
from psycopg2.extras import RealDictCursor

from leadhub.config import settings
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)


def _connect_kwargs() -> dict:
    if settings.database_url:
        return {"dsn": settings.database_url}
    required = {
        "DB_HOST": settings.db_host,
        "DB_NAME": settings.db_name,
        "DB_USER": settings.db_user,
        "DB_PASSWORD": settings.db_password,
    }
    for var, value in required.items():
        if not value:
            raise RuntimeError(f"Missing environment variable: {var}")
    return {
        "host": settings.db_host,
        "port": settings.db_port,
        "dbname": settings.db_name,
        "user": settings.db_user,
        "password": settings.db_password,
    }


def get_connection() -> psycopg2.extensions.connection:
    kwargs = _connect_kwargs()
    max_retries = max(1, settings.db_conn_retries)
    retry_delay = max(0.0, settings.db_conn_retry_delay)
    for attempt in range(1, max_retries + 1):
        try:
            return psycopg2.connect(options="-c client_encoding=UTF8", **kwargs)
        except OperationalError as exc:
            if attempt == max_retries:
                raise
            logger.warning(
                "Database not reachable (attempt %d/%d): %s", attempt, max_retries, exc
            )
            time.sleep(retry_delay)
    raise RuntimeError("Failed to connect to the database.")


@contextmanager
def get_cursor(cursor_factory=RealDictCursor) -> Generator[tuple[psycopg2.extensions.connection, psycopg2.extensions.cursor], None, None]:
    conn = get_connection()
    cur = conn.cursor(cursor_factory=cursor_factory)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def get_db() -> Generator[psycopg2.extensions.cursor, None, None]:
    """FastAPI dependency: one transaction per request, committed on success."""
    with get_cursor() as (_, cur):
        yield cur

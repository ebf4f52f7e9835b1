"""Database access layer using psycopg2.

Provides:
- get_conn(): Open a connection from DATABASE_URL
- txn(): Short transaction context manager
- fetchone(): Parameterized single-row query
"""

import os
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor


def get_conn() -> PgConnection:
    """Open a new database connection.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
        psycopg2.Error: On connection failure.
    """
    dsn = os.environ.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL environment variable not set")
    return psycopg2.connect(dsn)


@contextmanager
def txn(conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Yield a cursor inside a transaction.

    Commits on clean exit and rolls back on exception. A connection opened
    here is closed on exit; a caller-supplied one is left open.

    Example:
        with txn() as cur:
            cur.execute("INSERT INTO resumes (resume) VALUES (%s)", (data,))
    """
    owns_conn = conn is None
    if owns_conn:
        conn = get_conn()

    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if owns_conn:
            conn.close()


def fetchone(
    cur: PgCursor,
    query: str,
    params: Sequence[Any] | None = None,
) -> tuple[Any, ...] | None:
    """Execute query and fetch one row, or None if there are no results."""
    cur.execute(query, params)
    return cur.fetchone()

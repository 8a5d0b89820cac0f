"""
Statement executor used by repositories.

Repositories hand this module a composed statement and a mapping of named
parameters. Rows come back as dicts keyed by column name, writes report how
many rows they touched.

Connections are either per statement (open, run, commit or roll back,
close) or shared: once set_connection_override() has installed a
connection, every statement runs on it and committing is up to whoever
installed it. The integration tests share one connection and roll it back
after each test.
"""

from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from slimorm.config import config

Query = str | sql.Composable
Params = Mapping[str, Any] | Sequence[Any] | None

# =============================================================================
# Shared Connection
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """Run every following statement on conn, leaving transactions to the caller."""
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Go back to one connection per statement."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connections and Cursors
# =============================================================================


@contextmanager
def get_connection():
    """
    Yield the connection a statement should run on.

    The shared connection is yielded untouched when one is installed.
    Otherwise a connection to config.database_url is opened for the block
    and committed if the block succeeds, rolled back if it raises, and
    closed either way.
    """
    if _connection_override is not None:
        yield _connection_override
        return

    conn = psycopg.connect(config.database_url)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def get_cursor():
    """Yield a cursor whose rows are dicts keyed by column name."""
    with get_connection() as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            yield cur


# =============================================================================
# Executor Interface
# =============================================================================
#
# Repositories call these three functions and nothing else, so any object
# offering them (a mock in unit tests) can stand in for this module.


def execute(query: Query, params: Params = None) -> int:
    """
    Run a write and report how many rows it changed.

    Args:
        query: Statement, usually composed with psycopg.sql
        params: Values for its placeholders

    Returns:
        The cursor's rowcount, e.g. 1 after deleting one row
    """
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.rowcount


def fetch_one(query: Query, params: Params = None) -> dict[str, Any] | None:
    """First row of the result, or None when there is none."""
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.fetchone()


def fetch_all(query: Query, params: Params = None) -> list[dict[str, Any]]:
    """Every row of the result, in the order the database returned them."""
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.fetchall()

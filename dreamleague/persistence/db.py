"""
Database connection and initialization.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from dreamleague.config import get_settings

from .schema import all_schema_sql

logger = logging.getLogger(__name__)

_db_path: Path | None = None

# Seconds a writer waits for another writer's transaction to finish.
BUSY_TIMEOUT = 30.0


def set_db_path(path: str | Path) -> None:
    """Set the database path. Call before first get_connection if not using the configured one."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    """Return the current database path."""
    if _db_path is not None:
        return _db_path
    return get_settings().db_path


def get_connection(db_path: str | Path | None = None, timeout: float = BUSY_TIMEOUT) -> sqlite3.Connection:
    """
    Return a new SQLite connection in autocommit mode.
    Wrap every read-modify-write in `transaction(conn)`; the caller must close() it.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=timeout, isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
    """
    BEGIN IMMEDIATE ... COMMIT, or ROLLBACK on any exception.
    The write lock is taken before the first read, so concurrent writers are
    serialized and each one loads the state the previous one committed.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def init_db(db_path: str | Path | None = None) -> None:
    """Create or ensure all tables exist."""
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(all_schema_sql())
        conn.commit()
    finally:
        conn.close()
    logger.info("Database ready at %s", path)

# stock_ledger/database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from .. import config
from ..constants import SCHEMA_VERSION
from . import schema as schema_module
from .versioning import get_current_version, set_current_version


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases)
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
      - check_same_thread=False and a busy timeout, so worker threads can share
        it or open their own; writes are serialized by database.transactions
    Ensures the schema and version row are applied idempotently.

    `db_path` defaults to config.DB_PATH; pass ":memory:" for a throwaway store.
    """
    target = config.DB_PATH if db_path is None else db_path
    in_memory = str(target) == ":memory:"
    if not in_memory:
        Path(target).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        str(target),
        timeout=config.BUSY_TIMEOUT_S,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if not in_memory:
        conn.execute("PRAGMA journal_mode = WAL;")

    schema_module.apply_schema(conn)
    if get_current_version(conn) != SCHEMA_VERSION:
        set_current_version(conn, SCHEMA_VERSION)

    conn.commit()
    return conn


__all__ = [
    "get_connection",
]

# stock_ledger/database/transactions.py
"""
Write transactions.

Every write in the app goes through immediate_tx(). It holds a process-wide
re-entrant lock and opens a SQLite IMMEDIATE transaction, so:
  - threads sharing one connection never interleave statements of two writes;
  - threads (or processes) with their own connections queue on SQLite's
    RESERVED lock, waiting up to the connection's busy timeout.

Nested calls (the sale coordinator calling SalesRepo.append and
ProductsRepo.adjust_stock) join the outer transaction. The context manager
yields True only to the outermost caller, which is the one that commits and
therefore the one that should announce changes to live queries.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

_log = logging.getLogger(__name__)

_WRITE_LOCK = threading.RLock()


@contextmanager
def immediate_tx(conn: sqlite3.Connection) -> Iterator[bool]:
    """
    Start an IMMEDIATE transaction (write lock taken up front),
    commit on success, rollback on error.
    """
    with _WRITE_LOCK:
        if conn.in_transaction:
            yield False
            return

        conn.execute("BEGIN IMMEDIATE")
        try:
            yield True
            conn.commit()
        except BaseException:
            _log.debug("rolling back write transaction", exc_info=True)
            conn.rollback()
            raise

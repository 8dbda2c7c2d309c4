from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import sqlite3
from typing import Iterable

from ...constants import TABLE_SALES, TABLE_SALE_ITEMS
from ...utils.helpers import DateLike, from_db_ts, range_end, range_start, to_db_ts
from ..transactions import immediate_tx

_ID_BATCH = 500


@dataclass(frozen=True)
class SaleItem:
    product_id: int
    product_name: str
    quantity: int
    wholesale_price: float
    selling_price: float
    total_price: float


@dataclass(frozen=True)
class Sale:
    sale_id: int | None
    date: datetime
    items: tuple[SaleItem, ...]
    total_amount: float
    discount_percentage: float
    discount_amount: float
    final_amount: float
    profit: float

    @property
    def items_sold(self) -> int:
        return sum(it.quantity for it in self.items)


@dataclass
class _SaleRow:
    header: sqlite3.Row
    items: list[SaleItem] = field(default_factory=list)


class SalesRepo:
    """
    Ledger store: append-only history of committed sales.

    Key behavior:
      - append() stores the sale exactly as computed by the caller; totals are
        not re-derived here (the sale coordinator is the only writer).
      - There is no update or delete. Schema triggers reject both.
      - Items come back in entry order (line_no).
    """

    def __init__(self, conn: sqlite3.Connection, notifier=None):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.notifier = notifier

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def list_sales(self, newest_first: bool = False) -> list[Sale]:
        order = "DESC" if newest_first else "ASC"
        rows = self.conn.execute(
            f"SELECT * FROM sales ORDER BY date {order}, sale_id {order}"
        ).fetchall()
        return self._hydrate(rows)

    def list_by_date_range(self, start: DateLike, end: DateLike) -> list[Sale]:
        """
        Sales with start <= date <= end, oldest first.
        Bare dates cover the whole day on both ends.
        """
        rows = self.conn.execute(
            """
            SELECT * FROM sales
            WHERE date >= ? AND date <= ?
            ORDER BY date, sale_id
            """,
            (to_db_ts(range_start(start)), to_db_ts(range_end(end))),
        ).fetchall()
        return self._hydrate(rows)

    def get(self, sale_id: int) -> Sale | None:
        row = self.conn.execute("SELECT * FROM sales WHERE sale_id=?", (sale_id,)).fetchone()
        if row is None:
            return None
        return self._hydrate([row])[0]

    def recent(self, limit: int = 5) -> list[Sale]:
        rows = self.conn.execute(
            "SELECT * FROM sales ORDER BY date DESC, sale_id DESC LIMIT ?",
            (int(limit),),
        ).fetchall()
        return self._hydrate(rows)

    def count(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM sales").fetchone()[0])

    def _hydrate(self, headers: Iterable[sqlite3.Row]) -> list[Sale]:
        by_id: dict[int, _SaleRow] = {int(h["sale_id"]): _SaleRow(h) for h in headers}
        if not by_id:
            return []

        ids = list(by_id)
        item_rows: list[sqlite3.Row] = []
        # stay under SQLite's bound-parameter limit
        for i in range(0, len(ids), _ID_BATCH):
            chunk = ids[i:i + _ID_BATCH]
            marks = ",".join("?" for _ in chunk)
            item_rows += self.conn.execute(
                f"""
                SELECT sale_id, product_id, product_name, quantity,
                       wholesale_price, selling_price, total_price
                FROM sale_items
                WHERE sale_id IN ({marks})
                ORDER BY sale_id, line_no
                """,
                chunk,
            ).fetchall()
        for r in item_rows:
            by_id[int(r["sale_id"])].items.append(
                SaleItem(
                    product_id=int(r["product_id"]),
                    product_name=r["product_name"],
                    quantity=int(r["quantity"]),
                    wholesale_price=float(r["wholesale_price"]),
                    selling_price=float(r["selling_price"]),
                    total_price=float(r["total_price"]),
                )
            )

        return [
            Sale(
                sale_id=sid,
                date=from_db_ts(s.header["date"]),
                items=tuple(s.items),
                total_amount=float(s.header["total_amount"]),
                discount_percentage=float(s.header["discount_percentage"]),
                discount_amount=float(s.header["discount_amount"]),
                final_amount=float(s.header["final_amount"]),
                profit=float(s.header["profit"]),
            )
            for sid, s in by_id.items()
        ]

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def append(self, sale: Sale) -> int:
        """
        Insert the sale header and its items; returns the new sale_id.
        Joins the caller's transaction when there is one.
        """
        with immediate_tx(self.conn) as owner:
            cur = self.conn.execute(
                """
                INSERT INTO sales (
                    date, total_amount, discount_percentage,
                    discount_amount, final_amount, profit
                )
                VALUES (?,?,?,?,?,?)
                """,
                (
                    to_db_ts(sale.date),
                    sale.total_amount,
                    sale.discount_percentage,
                    sale.discount_amount,
                    sale.final_amount,
                    sale.profit,
                ),
            )
            sid = int(cur.lastrowid)
            self.conn.executemany(
                """
                INSERT INTO sale_items (
                    sale_id, line_no, product_id, product_name, quantity,
                    wholesale_price, selling_price, total_price
                ) VALUES (?,?,?,?,?,?,?,?)
                """,
                [
                    (
                        sid, line_no, it.product_id, it.product_name, it.quantity,
                        it.wholesale_price, it.selling_price, it.total_price,
                    )
                    for line_no, it in enumerate(sale.items, start=1)
                ],
            )
        if owner and self.notifier is not None:
            self.notifier.notify(TABLE_SALES, TABLE_SALE_ITEMS)
        return sid


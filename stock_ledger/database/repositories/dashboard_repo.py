# stock_ledger/database/repositories/dashboard_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import sqlite3
from typing import Any, List, NamedTuple, Optional, Tuple

from ...constants import LOW_STOCK_THRESHOLD
from ...utils.helpers import DateLike, range_end, range_start, to_db_ts
from .products_repo import Product
from .sales_repo import Sale, SalesRepo


def _to_float(x: Optional[Any]) -> float:
    try:
        return float(x or 0.0)
    except (TypeError, ValueError):
        return 0.0


class SalesSummary(NamedTuple):
    sale_count: int
    total_sales: float   # sum of final_amount, i.e. after discount
    total_profit: float
    items_sold: int


@dataclass(frozen=True)
class DailySales:
    day: date
    sales: float
    profit: float
    items: int


class DashboardRepo:
    """
    Thin query layer for the dashboard and the reports screen.

    All methods are read-only consumers of committed data.

    Performance note:
    - Sale dates are stored as fixed-width ISO text and compared directly
      (date >= ? AND date <= ?) so SQLite can use idx_sales_date.
    - Bare `date` bounds cover the whole day; `datetime` bounds are exact.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self._sales = SalesRepo(conn)

    # ----------------------------- Catalog -----------------------------

    def product_count(self) -> int:
        return int(self._scalar("SELECT COUNT(*) AS v FROM products", ()) or 0)

    def low_stock_products(self, threshold: int = LOW_STOCK_THRESHOLD) -> List[Product]:
        """Products whose stock is strictly below `threshold`, lowest first."""
        rows = self.conn.execute(
            """
            SELECT product_id, name, description, wholesale_price, selling_price,
                   stock, category, created_at
            FROM products
            WHERE stock < ?
            ORDER BY stock, product_id
            """,
            (int(threshold),),
        ).fetchall()
        return [Product.from_row(r) for r in rows]

    def stock_value(self) -> Tuple[float, float]:
        """(at wholesale, at selling price) of everything currently on hand."""
        r = self.conn.execute(
            """
            SELECT COALESCE(SUM(stock * wholesale_price), 0.0) AS cost,
                   COALESCE(SUM(stock * selling_price), 0.0)   AS retail
            FROM products
            """
        ).fetchone()
        return _to_float(r["cost"]), _to_float(r["retail"])

    # ----------------------------- Sales & profit -----------------------------

    def sales_summary(
        self,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> SalesSummary:
        where, params = self._date_filter(start, end)
        r = self.conn.execute(
            f"""
            SELECT COUNT(*)                           AS n,
                   COALESCE(SUM(s.final_amount), 0.0) AS sales,
                   COALESCE(SUM(s.profit), 0.0)       AS profit
            FROM sales s
            {where}
            """,
            params,
        ).fetchone()
        items = self._scalar(
            f"""
            SELECT COALESCE(SUM(si.quantity), 0)
            FROM sale_items si
            JOIN sales s ON s.sale_id = si.sale_id
            {where}
            """,
            tuple(params),
        )
        return SalesSummary(
            sale_count=int(r["n"]),
            total_sales=_to_float(r["sales"]),
            total_profit=_to_float(r["profit"]),
            items_sold=int(items or 0),
        )

    def daily_breakdown(self, start: DateLike, end: DateLike) -> List[DailySales]:
        """
        One row per calendar day that had sales, oldest first.
        """
        where, params = self._date_filter(start, end)
        rows = self.conn.execute(
            f"""
            SELECT substr(s.date, 1, 10)            AS day,
                   SUM(s.final_amount)              AS sales,
                   SUM(s.profit)                    AS profit,
                   SUM((SELECT COALESCE(SUM(si.quantity), 0)
                        FROM sale_items si WHERE si.sale_id = s.sale_id)) AS items
            FROM sales s
            {where}
            GROUP BY day
            ORDER BY day
            """,
            params,
        ).fetchall()
        return [
            DailySales(
                day=date.fromisoformat(r["day"]),
                sales=_to_float(r["sales"]),
                profit=_to_float(r["profit"]),
                items=int(r["items"] or 0),
            )
            for r in rows
        ]

    def recent_sales(self, limit: int = 5) -> List[Sale]:
        return self._sales.recent(limit)

    # ----------------------------- helpers -----------------------------

    @staticmethod
    def _date_filter(
        start: Optional[DateLike], end: Optional[DateLike]
    ) -> Tuple[str, list]:
        clauses: list[str] = []
        params: list = []
        if start is not None:
            clauses.append("s.date >= ?")
            params.append(to_db_ts(range_start(start)))
        if end is not None:
            clauses.append("s.date <= ?")
            params.append(to_db_ts(range_end(end)))
        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        return where, params

    def _scalar(self, sql: str, params: tuple) -> Any:
        row = self.conn.execute(sql, params).fetchone()
        return None if row is None else row[0]

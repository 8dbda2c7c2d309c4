# stock_ledger/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import sqlite3
from typing import Any, Optional

from ...constants import TABLE_PRODUCTS
from ...errors import InsufficientStockError, NotFoundError, ValidationError
from ...utils.helpers import from_db_ts, now, to_db_ts
from ...utils.validators import (
    INT_MAX,
    is_non_negative_int,
    is_non_negative_number,
    non_empty,
    try_parse_float,
    try_parse_int,
)
from ..transactions import immediate_tx

_log = logging.getLogger(__name__)

_COLUMNS = (
    "product_id, name, description, wholesale_price, selling_price, "
    "stock, category, created_at"
)

# fields a caller may patch through update(); stock edits here are the
# "explicit catalog edit" path, sales go through adjust_stock()
_EDITABLE = ("name", "description", "wholesale_price", "selling_price", "stock", "category")


@dataclass
class Product:
    product_id: int | None
    name: str
    description: str
    wholesale_price: float
    selling_price: float
    stock: int
    category: str
    created_at: datetime

    @classmethod
    def from_row(cls, r: sqlite3.Row) -> "Product":
        return cls(
            product_id=int(r["product_id"]),
            name=r["name"],
            description=r["description"] or "",
            wholesale_price=float(r["wholesale_price"]),
            selling_price=float(r["selling_price"]),
            stock=int(r["stock"]),
            category=r["category"],
            created_at=from_db_ts(r["created_at"]),
        )


def _clean_field(field: str, value: Any) -> Any:
    """Validate and normalize a single product field; raises ValidationError."""
    if field not in _EDITABLE:
        raise ValidationError(f"Unknown or read-only product field: {field!r}.")
    if field in ("name", "category"):
        if not non_empty(value):
            raise ValidationError(f"Product {field} is required.")
        return str(value).strip()
    if field == "description":
        return "" if value is None else str(value)
    if field in ("wholesale_price", "selling_price"):
        label = field.replace("_", " ")
        if not is_non_negative_number(value):
            raise ValidationError(f"{label.capitalize()} must be a number >= 0.")
        return try_parse_float(value)[1]
    # stock
    if not is_non_negative_int(value):
        raise ValidationError("Stock must be a whole number >= 0.")
    return try_parse_int(value)[1]


class ProductsRepo:
    """
    Catalog store.

    Writes run in immediate_tx(); after the outermost commit the optional
    ChangeNotifier is told the products table changed.
    """

    def __init__(self, conn: sqlite3.Connection, notifier=None):
        self.conn = conn
        # Use Row for named access
        self.conn.row_factory = sqlite3.Row
        self.notifier = notifier

    def _changed(self, committed: bool) -> None:
        if committed and self.notifier is not None:
            self.notifier.notify(TABLE_PRODUCTS)

    # ---------------------------- Reads ----------------------------

    def list_products(self) -> list[Product]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products ORDER BY product_id"
        ).fetchall()
        return [Product.from_row(r) for r in rows]

    def get(self, product_id: int) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return Product.from_row(r) if r else None

    def search(self, term: str) -> list[Product]:
        """Case-insensitive substring match on name or category."""
        term = (term or "").strip()
        if not term:
            return self.list_products()
        pattern = "%" + term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        rows = self.conn.execute(
            f"""
            SELECT {_COLUMNS} FROM products
            WHERE lower(name) LIKE ? ESCAPE '\\'
               OR lower(category) LIKE ? ESCAPE '\\'
            ORDER BY product_id
            """,
            (pattern, pattern),
        ).fetchall()
        return [Product.from_row(r) for r in rows]

    def stock_of(self, product_id: int) -> Optional[int]:
        r = self.conn.execute(
            "SELECT stock FROM products WHERE product_id=?", (product_id,)
        ).fetchone()
        return int(r["stock"]) if r else None

    # ---------------------------- Writes ----------------------------

    def create(
        self,
        name: str,
        description: str | None,
        wholesale_price: float,
        selling_price: float,
        stock: int,
        category: str,
    ) -> int:
        values = {
            "name": _clean_field("name", name),
            "description": _clean_field("description", description),
            "wholesale_price": _clean_field("wholesale_price", wholesale_price),
            "selling_price": _clean_field("selling_price", selling_price),
            "stock": _clean_field("stock", stock),
            "category": _clean_field("category", category),
        }
        with immediate_tx(self.conn) as owner:
            cur = self.conn.execute(
                "INSERT INTO products(name, description, wholesale_price, selling_price, "
                "stock, category, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    values["name"],
                    values["description"],
                    values["wholesale_price"],
                    values["selling_price"],
                    values["stock"],
                    values["category"],
                    to_db_ts(now()),
                ),
            )
            pid = int(cur.lastrowid)
        _log.debug("product %s created (%s)", pid, values["name"])
        self._changed(owner)
        return pid

    def update(self, product_id: int, **changes: Any) -> None:
        """
        Partial patch. Only the fields passed are validated and written.
        An unknown id raises NotFoundError before any field is checked.
        """
        with immediate_tx(self.conn) as owner:
            if self.get(product_id) is None:
                raise NotFoundError(f"Product #{product_id} does not exist.")
            cleaned = {field: _clean_field(field, value) for field, value in changes.items()}
            if cleaned:
                # keys were checked against _EDITABLE by _clean_field
                assignments = ", ".join(f"{field}=?" for field in cleaned)
                self.conn.execute(
                    f"UPDATE products SET {assignments} WHERE product_id=?",
                    (*cleaned.values(), product_id),
                )
        if cleaned:
            self._changed(owner)

    def delete(self, product_id: int) -> None:
        """
        Hard delete. Historical sale items keep their own snapshot of the
        product's name and prices, so they are not touched.
        """
        with immediate_tx(self.conn) as owner:
            cur = self.conn.execute("DELETE FROM products WHERE product_id=?", (product_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Product #{product_id} does not exist.")
        self._changed(owner)

    def adjust_stock(self, product_id: int, delta: int) -> int:
        """
        Atomically apply stock += delta and return the new level.

        The check and the write are one conditional UPDATE executed under the
        write lock, so two concurrent decrements can never both succeed
        against the same units.
        """
        ok, d = try_parse_int(delta)
        if not ok:
            raise ValidationError("Stock adjustment must be a whole number.")

        with immediate_tx(self.conn) as owner:
            cur = self.conn.execute(
                "UPDATE products SET stock = stock + ? "
                "WHERE product_id=? AND stock + ? BETWEEN 0 AND ?",
                (d, product_id, d, INT_MAX),
            )
            if cur.rowcount == 0:
                r = self.conn.execute(
                    "SELECT name, stock FROM products WHERE product_id=?", (product_id,)
                ).fetchone()
                if r is None:
                    raise NotFoundError(f"Product #{product_id} does not exist.")
                if int(r["stock"]) + d > INT_MAX:
                    raise ValidationError("Stock adjustment would overflow the stock level.")
                raise InsufficientStockError(product_id, -d, int(r["stock"]), r["name"])
            new_stock = self.stock_of(product_id)
        self._changed(owner)
        return int(new_stock)

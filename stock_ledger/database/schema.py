import sqlite3

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CATALOG ======================== */

CREATE TABLE IF NOT EXISTS products (
    product_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT    NOT NULL CHECK (length(trim(name)) > 0),
    description     TEXT    NOT NULL DEFAULT '',
    wholesale_price REAL    NOT NULL CHECK (wholesale_price >= 0),
    selling_price   REAL    NOT NULL CHECK (selling_price >= 0),
    stock           INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
    category        TEXT    NOT NULL CHECK (length(trim(category)) > 0),
    created_at      TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_products_name     ON products(name);
CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);

/* ======================== LEDGER ======================== */

CREATE TABLE IF NOT EXISTS sales (
    sale_id             INTEGER PRIMARY KEY AUTOINCREMENT,
    date                TEXT NOT NULL,
    total_amount        REAL NOT NULL,
    discount_percentage REAL NOT NULL DEFAULT 0,
    discount_amount     REAL NOT NULL DEFAULT 0,
    final_amount        REAL NOT NULL,
    profit              REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(date);

/* product_id is a weak reference: no FK, the row keeps a snapshot of
   name and prices so deleting the product leaves history untouched */
CREATE TABLE IF NOT EXISTS sale_items (
    item_id         INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id         INTEGER NOT NULL,
    line_no         INTEGER NOT NULL,
    product_id      INTEGER NOT NULL,
    product_name    TEXT    NOT NULL,
    quantity        INTEGER NOT NULL CHECK (quantity > 0),
    wholesale_price REAL    NOT NULL,
    selling_price   REAL    NOT NULL,
    total_price     REAL    NOT NULL,
    UNIQUE (sale_id, line_no),
    UNIQUE (sale_id, product_id),
    FOREIGN KEY (sale_id) REFERENCES sales(sale_id)
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);

/* -------- committed sales are immutable -------- */
CREATE TRIGGER IF NOT EXISTS trg_sales_no_update
BEFORE UPDATE ON sales
BEGIN
  SELECT RAISE(ABORT, 'Committed sales are immutable');
END;

CREATE TRIGGER IF NOT EXISTS trg_sales_no_delete
BEFORE DELETE ON sales
BEGIN
  SELECT RAISE(ABORT, 'Committed sales are immutable');
END;

CREATE TRIGGER IF NOT EXISTS trg_sale_items_no_update
BEFORE UPDATE ON sale_items
BEGIN
  SELECT RAISE(ABORT, 'Committed sale items are immutable');
END;

CREATE TRIGGER IF NOT EXISTS trg_sale_items_no_delete
BEFORE DELETE ON sale_items
BEGIN
  SELECT RAISE(ABORT, 'Committed sale items are immutable');
END;
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)
    conn.commit()


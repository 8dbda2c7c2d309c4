# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns the QApplication (offscreen platform, no display needed)
# - every test gets a fresh SQLite file under tmp_path, schema applied by
#   get_connection(), so triggers/WAL behave like production
# - repos and the sale service share one ChangeNotifier per test
# ---------------------------------------------------------------------

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from stock_ledger.database import get_connection
from stock_ledger.database.live_query import ChangeNotifier
from stock_ledger.database.repositories import DashboardRepo, ProductsRepo, SalesRepo
from stock_ledger.modules.sales import SaleService


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "stock_ledger.db"


@pytest.fixture()
def conn(db_path):
    c = get_connection(db_path)
    try:
        yield c
    finally:
        c.close()


@pytest.fixture()
def notifier(qapp):
    return ChangeNotifier()


@pytest.fixture()
def products(conn, notifier) -> ProductsRepo:
    return ProductsRepo(conn, notifier)


@pytest.fixture()
def sales(conn, notifier) -> SalesRepo:
    return SalesRepo(conn, notifier)


@pytest.fixture()
def dashboard(conn) -> DashboardRepo:
    return DashboardRepo(conn)


@pytest.fixture()
def service(conn, notifier) -> SaleService:
    return SaleService(conn, notifier)


@pytest.fixture()
def make_product(products):
    """Factory: make_product(stock=10, wholesale=100, selling=150, name=..., category=...)."""
    counter = {"n": 0}

    def _make(
        stock: int = 10,
        wholesale: float = 100.0,
        selling: float = 150.0,
        name: str | None = None,
        category: str = "General",
        description: str = "",
    ) -> int:
        counter["n"] += 1
        return products.create(
            name=name or f"Widget {counter['n']}",
            description=description,
            wholesale_price=wholesale,
            selling_price=selling,
            stock=stock,
            category=category,
        )

    return _make

# stock_ledger/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from stock_ledger.database.repositories import (
        # Catalog
        ProductsRepo, Product,
        # Ledger
        SalesRepo, Sale, SaleItem,
        # Dashboard / reports
        DashboardRepo, SalesSummary, DailySales,
    )
"""

# ---------------- Products -----------------
from .products_repo import ProductsRepo, Product

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, Sale, SaleItem

# ---------------- Dashboard ----------------
from .dashboard_repo import DashboardRepo, SalesSummary, DailySales

__all__ = [
    # products_repo
    "ProductsRepo",
    "Product",
    # sales_repo
    "SalesRepo",
    "Sale",
    "SaleItem",
    # dashboard_repo
    "DashboardRepo",
    "SalesSummary",
    "DailySales",
]

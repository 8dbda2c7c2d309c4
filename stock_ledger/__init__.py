"""
Stock Ledger: product catalog, stock levels and sales history for a small shop.

Public entry points:
    from stock_ledger.database import get_connection
    from stock_ledger.database.repositories import ProductsRepo, SalesRepo, DashboardRepo
    from stock_ledger.database.live_query import ChangeNotifier
    from stock_ledger.modules.sales import SaleService
"""

__version__ = "1.0.0"

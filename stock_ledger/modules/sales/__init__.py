# stock_ledger/modules/sales/__init__.py

"""
Sales module package exports.

- SaleService: completes and previews sales (the only writer of the ledger)
- BasketLine, SalePreview, Shortage: its input/output shapes
- pricing helpers: line_total, line_profit, sale_totals, SaleTotals
"""

from .pricing import SaleTotals, line_profit, line_total, sale_totals
from .service import BasketLine, SalePreview, SaleService, Shortage

__all__ = [
    "SaleService",
    "BasketLine",
    "SalePreview",
    "Shortage",
    "SaleTotals",
    "line_profit",
    "line_total",
    "sale_totals",
]

# stock_ledger/modules/sales/pricing.py
"""
Pricing & profit arithmetic for a sale. Pure functions, no I/O.

One discount rate applies uniformly to every line of a sale; there is no
per-item discount. Values are plain floats and nothing is rounded here:
rounding belongs to display code.

The discount percentage is not range-checked or clamped in this module.
SaleService rejects values outside [0, 100] before calling in.
"""
from __future__ import annotations

from typing import Iterable, NamedTuple, Protocol


class PricedLine(Protocol):
    wholesale_price: float
    selling_price: float
    quantity: int
    total_price: float


class SaleTotals(NamedTuple):
    total_amount: float
    discount_amount: float
    final_amount: float
    profit: float


def line_total(selling_price: float, quantity: int) -> float:
    return selling_price * quantity


def line_profit(
    wholesale_price: float,
    selling_price: float,
    quantity: int,
    discount_percentage: float = 0.0,
) -> float:
    """
    Profit of one line after its share of the sale-level discount:
        (selling * qty - selling * qty * pct/100) - wholesale * qty
    """
    gross = selling_price * quantity
    discount = gross * discount_percentage / 100
    return (gross - discount) - wholesale_price * quantity


def sale_totals(items: Iterable[PricedLine], discount_percentage: float) -> SaleTotals:
    items = list(items)
    total_amount = sum((it.total_price for it in items), 0.0)
    discount_amount = total_amount * discount_percentage / 100
    final_amount = total_amount - discount_amount
    profit = sum(
        (
            line_profit(it.wholesale_price, it.selling_price, it.quantity, discount_percentage)
            for it in items
        ),
        0.0,
    )
    return SaleTotals(
        total_amount=total_amount,
        discount_amount=discount_amount,
        final_amount=final_amount,
        profit=profit,
    )

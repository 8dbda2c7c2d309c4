# stock_ledger/modules/sales/service.py
"""
Sale completion: turns a basket into a committed ledger entry.

SaleService is the only writer of sales and the only caller of
ProductsRepo.adjust_stock() on the sale path. complete_sale() runs the
whole sequence (lookup, price snapshot, totals, stock pre-check, ledger
append, stock decrements) inside one immediate_tx(), so either every
step lands or none does, and no other writer can slip between the stock
check and the decrement.

Basket lines may be given as BasketLine tuples, plain (product_id, quantity)
pairs, or mappings with "product_id" and "quantity" keys. Lines for the same
product are merged into one SaleItem at the position of first appearance.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
import logging
import sqlite3
from typing import Iterable, NamedTuple, Optional

from ...constants import TABLE_PRODUCTS, TABLE_SALE_ITEMS, TABLE_SALES
from ...database.repositories.products_repo import Product, ProductsRepo
from ...database.repositories.sales_repo import Sale, SaleItem, SalesRepo
from ...database.transactions import immediate_tx
from ...errors import (
    ConsistencyFault,
    DomainError,
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    ValidationError,
)
from ...utils.helpers import as_local, now
from ...utils.loggers import get_logger, log_event
from ...utils.validators import is_percentage, try_parse_float, try_parse_int
from .pricing import SaleTotals, line_total, sale_totals


class BasketLine(NamedTuple):
    product_id: int
    quantity: int


class Shortage(NamedTuple):
    product_id: int
    product_name: str
    requested: int
    available: int


@dataclass(frozen=True)
class SalePreview:
    """What complete_sale() would record right now, without writing anything."""
    items: tuple[SaleItem, ...]
    totals: SaleTotals
    discount_percentage: float
    shortages: tuple[Shortage, ...]

    @property
    def can_complete(self) -> bool:
        return not self.shortages


class SaleService:
    def __init__(
        self,
        conn: sqlite3.Connection,
        notifier=None,
        logger: Optional[logging.Logger] = None,
    ):
        self.conn = conn
        # repos join our transaction; we announce changes once, after commit
        self.products = ProductsRepo(conn)
        self.sales = SalesRepo(conn)
        self.notifier = notifier
        self.log = logger or get_logger("stock_ledger.sales")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def complete_sale(
        self,
        basket: Iterable,
        discount_percentage: float = 0.0,
        *,
        date: Optional[datetime] = None,
    ) -> Sale:
        """
        Validate, price and commit a sale; returns the stored Sale.

        Raises ValidationError / InvalidQuantityError / NotFoundError /
        InsufficientStockError with all stores unchanged. ConsistencyFault
        means the ledger append could not be matched by its stock decrements;
        the transaction is rolled back and the fault logged at CRITICAL.
        """
        try:
            lines = self._parse_basket(basket)
            discount = self._parse_discount(discount_percentage)
            with immediate_tx(self.conn) as owner:
                items = self._snapshot(lines)
                totals = sale_totals(items, discount)
                shortages = self._shortages(items)
                if shortages:
                    first = shortages[0]
                    raise InsufficientStockError(
                        first.product_id, first.requested, first.available, first.product_name
                    )

                sale = Sale(
                    sale_id=None,
                    date=as_local(date) if date is not None else now(),
                    items=tuple(items),
                    total_amount=totals.total_amount,
                    discount_percentage=discount,
                    discount_amount=totals.discount_amount,
                    final_amount=totals.final_amount,
                    profit=totals.profit,
                )
                sale_id = self.sales.append(sale)
                self._decrement_stock(sale_id, items)
        except DomainError as exc:
            log_event(
                self.log, "sale", "rejected", str(exc),
                {"error": type(exc).__name__},
                level=logging.WARNING,
            )
            raise

        committed = replace(sale, sale_id=sale_id)
        log_event(
            self.log, "sale", "committed", f"Sale #{sale_id} committed",
            {
                "sale_id": sale_id,
                "lines": len(items),
                "items_sold": committed.items_sold,
                "final_amount": committed.final_amount,
                "profit": committed.profit,
            },
        )
        if owner and self.notifier is not None:
            self.notifier.notify(TABLE_SALES, TABLE_SALE_ITEMS, TABLE_PRODUCTS)
        return committed

    def preview(self, basket: Iterable, discount_percentage: float = 0.0) -> SalePreview:
        """
        Same validation, merge and pricing as complete_sale(), read-only.
        Stock shortfalls are reported in SalePreview.shortages instead of raised.
        """
        lines = self._parse_basket(basket)
        discount = self._parse_discount(discount_percentage)
        items = self._snapshot(lines)
        return SalePreview(
            items=tuple(items),
            totals=sale_totals(items, discount),
            discount_percentage=discount,
            shortages=tuple(self._shortages(items)),
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    @staticmethod
    def _parse_basket(basket: Iterable) -> list[BasketLine]:
        if basket is None:
            raise ValidationError("The basket is empty.")
        lines: list[BasketLine] = []
        for raw in basket:
            if isinstance(raw, Mapping):
                try:
                    pid, qty = raw["product_id"], raw["quantity"]
                except KeyError as exc:
                    raise ValidationError(f"Basket line is missing {exc.args[0]!r}.") from exc
            else:
                try:
                    pid, qty = raw
                except (TypeError, ValueError) as exc:
                    raise ValidationError(
                        "Basket lines must be (product_id, quantity) pairs."
                    ) from exc
            lines.append(BasketLine(pid, qty))
        if not lines:
            raise ValidationError("The basket is empty.")
        return lines

    @staticmethod
    def _parse_discount(value) -> float:
        if not is_percentage(value):
            raise ValidationError("Discount must be a percentage between 0 and 100.")
        return try_parse_float(value)[1]

    def _snapshot(self, lines: list[BasketLine]) -> list[SaleItem]:
        """
        Resolve every line against the catalog, merge repeats, and freeze the
        current name and prices into SaleItems.
        """
        merged: dict[int, list] = {}
        for line in lines:
            ok, pid = try_parse_int(line.product_id)
            product: Product | None = self.products.get(pid) if ok else None
            if product is None:
                raise NotFoundError(f"Product #{line.product_id} does not exist.")

            ok, qty = try_parse_int(line.quantity)
            if not ok or qty <= 0:
                raise InvalidQuantityError(
                    f"Quantity for {product.name} must be a whole number greater than 0."
                )

            if pid in merged:
                merged[pid][1] += qty
            else:
                merged[pid] = [product, qty]

        return [
            SaleItem(
                product_id=pid,
                product_name=product.name,
                quantity=qty,
                wholesale_price=product.wholesale_price,
                selling_price=product.selling_price,
                total_price=line_total(product.selling_price, qty),
            )
            for pid, (product, qty) in merged.items()
        ]

    def _shortages(self, items: list[SaleItem]) -> list[Shortage]:
        out: list[Shortage] = []
        for it in items:
            available = self.products.stock_of(it.product_id) or 0
            if it.quantity > available:
                out.append(Shortage(it.product_id, it.product_name, it.quantity, available))
        return out

    def _decrement_stock(self, sale_id: int, items: list[SaleItem]) -> None:
        for it in items:
            try:
                self.products.adjust_stock(it.product_id, -it.quantity)
            except DomainError as exc:
                log_event(
                    self.log, "sale", "consistency_fault",
                    f"Sale #{sale_id} appended but stock of product #{it.product_id} "
                    f"could not be decremented: {exc}",
                    {"sale_id": sale_id, "product_id": it.product_id, "quantity": it.quantity},
                    level=logging.CRITICAL,
                )
                raise ConsistencyFault(
                    f"Stock decrement failed after sale #{sale_id} was appended "
                    f"(product #{it.product_id}); the sale was rolled back."
                ) from exc

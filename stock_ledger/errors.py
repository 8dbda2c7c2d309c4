# stock_ledger/errors.py
"""
Error taxonomy shared by the repositories and the sale coordinator.

DomainError and its subclasses are expected, user-recoverable conditions:
the operation is aborted, nothing is written, and the message is suitable
for showing to the user as-is.

ConsistencyFault is deliberately *not* a DomainError. It means the ledger and
the catalog disagree (a sale without its stock decrement) and must be logged
and surfaced separately; it is never retried.
"""


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


class ValidationError(DomainError):
    """Malformed input: empty basket, empty required field, out-of-range number."""
    pass


class InvalidQuantityError(ValidationError):
    """A basket line asked for zero, a negative, or a fractional quantity."""
    pass


class NotFoundError(DomainError):
    """Referenced product or sale id does not exist."""
    pass


class InsufficientStockError(DomainError):
    def __init__(self, product_id: int, requested: int, available: int, product_name: str | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.product_name = product_name
        label = product_name or f"product #{product_id}"
        super().__init__(
            f"Not enough stock for {label}: requested {requested}, available {available}."
        )


class ConsistencyFault(RuntimeError):
    """Ledger and catalog diverged; an internal invariant was broken."""
    pass

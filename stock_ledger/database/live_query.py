# stock_ledger/database/live_query.py
"""
Live queries: "always show the current result of this read".

Writers call ChangeNotifier.notify("products", ...) after their transaction
commits. Each LiveQuery subscribed to one of those tables re-runs its query
function and emits resultsChanged when the result differs from the last one.

Signals are connected with Qt.DirectConnection: the refresh runs in the
writer's thread right after the commit, with or without a running event loop.
Nothing here validates or writes.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from PySide6.QtCore import QObject, Qt, Signal

_log = logging.getLogger(__name__)

_DIRECT = Qt.ConnectionType.DirectConnection


class LiveQuery(QObject):
    resultsChanged = Signal(object)

    def __init__(
        self,
        notifier: "ChangeNotifier",
        query_fn: Callable[[], Any],
        tables: Optional[Iterable[str]] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._notifier = notifier
        self._query_fn = query_fn
        self.tables = frozenset(tables) if tables is not None else None
        self._active = True
        self._current = query_fn()
        notifier.tablesChanged.connect(self._on_tables_changed, type=_DIRECT)

    @property
    def current(self) -> Any:
        return self._current

    @property
    def active(self) -> bool:
        return self._active

    def depends_on(self, tables: frozenset) -> bool:
        return self.tables is None or bool(self.tables & tables)

    def refresh(self) -> Any:
        """Re-run the query now; emits resultsChanged if the result moved."""
        result = self._query_fn()
        if result != self._current:
            self._current = result
            self.resultsChanged.emit(result)
        return result

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._notifier.tablesChanged.disconnect(self._on_tables_changed)
        self._notifier._release(self)

    def _on_tables_changed(self, tables: frozenset) -> None:
        if self._active and self.depends_on(tables):
            self.refresh()


class ChangeNotifier(QObject):
    """
    Registry of live queries keyed by the tables they read.

    Typical use (presentation side):
        notifier = ChangeNotifier()
        products = ProductsRepo(conn, notifier)
        lq = notifier.subscribe(products.list_products, tables=["products"],
                                callback=table_model.replace)
        ...
        lq.unsubscribe()
    """

    tablesChanged = Signal(object)  # frozenset[str] of touched tables

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._subscriptions: list[LiveQuery] = []

    def subscribe(
        self,
        query_fn: Callable[[], Any],
        tables: Optional[Iterable[str]] = None,
        callback: Optional[Callable[[Any], None]] = None,
    ) -> LiveQuery:
        """
        Evaluate `query_fn` now and again after every write touching `tables`
        (any table when None). `callback` receives each changed result.
        """
        lq = LiveQuery(self, query_fn, tables)
        if callback is not None:
            lq.resultsChanged.connect(callback, type=_DIRECT)
        self._subscriptions.append(lq)
        return lq

    def subscriptions(self) -> list[LiveQuery]:
        return list(self._subscriptions)

    def notify(self, *tables: str) -> None:
        touched = frozenset(tables)
        if not touched:
            return
        _log.debug("tables changed: %s", ", ".join(sorted(touched)))
        self.tablesChanged.emit(touched)

    def _release(self, lq: LiveQuery) -> None:
        if lq in self._subscriptions:
            self._subscriptions.remove(lq)

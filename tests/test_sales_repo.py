from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta, timezone

import pytest

from stock_ledger.database.repositories import Sale, SaleItem


def _sale(when: datetime, *items: SaleItem, discount: float = 0.0) -> Sale:
    total = sum(it.total_price for it in items)
    disc = total * discount / 100
    return Sale(
        sale_id=None,
        date=when,
        items=tuple(items),
        total_amount=total,
        discount_percentage=discount,
        discount_amount=disc,
        final_amount=total - disc,
        profit=0.0,
    )


def _item(pid: int, qty: int, selling: float = 10.0, wholesale: float = 6.0) -> SaleItem:
    return SaleItem(pid, f"Product {pid}", qty, wholesale, selling, selling * qty)


def test_append_assigns_id_and_round_trips(sales):
    when = datetime(2026, 3, 14, 9, 26, 53, 589793)
    sid = sales.append(_sale(when, _item(1, 2), _item(7, 1, selling=3.5), discount=10))
    got = sales.get(sid)

    assert got.sale_id == sid
    assert got.date == when
    assert [it.product_id for it in got.items] == [1, 7]
    assert got.items[1] == _item(7, 1, selling=3.5)
    assert got.total_amount == 23.5
    assert got.discount_percentage == 10


def test_append_stores_totals_as_given(sales):
    # no re-derivation: the coordinator is trusted
    s = Sale(None, datetime(2026, 1, 1), (_item(1, 1),), 999.0, 0.0, 0.0, 1.0, 5.0)
    sid = sales.append(s)
    got = sales.get(sid)
    assert (got.total_amount, got.final_amount, got.profit) == (999.0, 1.0, 5.0)


def test_list_is_chronological_regardless_of_insert_order(sales):
    late = sales.append(_sale(datetime(2026, 5, 2), _item(1, 1)))
    early = sales.append(_sale(datetime(2026, 5, 1), _item(1, 1)))
    assert [s.sale_id for s in sales.list_sales()] == [early, late]
    assert [s.sale_id for s in sales.list_sales(newest_first=True)] == [late, early]
    assert sales.list_sales() == sales.list_sales()


def test_date_range_is_inclusive(sales):
    ids = {
        d: sales.append(_sale(datetime(2026, 6, d, 12), _item(1, 1)))
        for d in (1, 2, 3, 4)
    }
    got = sales.list_by_date_range(datetime(2026, 6, 2, 12), datetime(2026, 6, 3, 12))
    assert [s.sale_id for s in got] == [ids[2], ids[3]]


def test_date_bounds_cover_whole_days(sales):
    morning = sales.append(_sale(datetime(2026, 6, 2, 0, 0), _item(1, 1)))
    night = sales.append(_sale(datetime(2026, 6, 2, 23, 59, 59, 999999), _item(1, 1)))
    sales.append(_sale(datetime(2026, 6, 3, 0, 0), _item(1, 1)))

    got = sales.list_by_date_range(date(2026, 6, 2), date(2026, 6, 2))
    assert [s.sale_id for s in got] == [morning, night]


def test_aware_dates_order_and_filter_by_instant(sales):
    utc = timezone.utc
    plus5 = timezone(timedelta(hours=5))
    # 08:00 UTC is later than 10:00+05:00 (05:00 UTC)
    later = sales.append(_sale(datetime(2026, 6, 2, 8, tzinfo=utc), _item(1, 1)))
    earlier = sales.append(_sale(datetime(2026, 6, 2, 10, tzinfo=plus5), _item(1, 1)))

    assert [s.sale_id for s in sales.list_sales()] == [earlier, later]
    got = sales.list_by_date_range(
        datetime(2026, 6, 2, 6, tzinfo=utc), datetime(2026, 6, 2, 9, tzinfo=utc)
    )
    assert [s.sale_id for s in got] == [later]


def test_recent_returns_newest_first(sales):
    ids = [sales.append(_sale(datetime(2026, 7, d), _item(1, 1))) for d in range(1, 8)]
    assert [s.sale_id for s in sales.recent(5)] == list(reversed(ids))[:5]
    assert sales.count() == 7


def test_get_unknown_returns_none(sales):
    assert sales.get(12345) is None


def test_many_sales_hydrate_with_items(sales):
    for i in range(1, 1201):
        sales.append(_sale(datetime(2026, 1, 1, 0, 0, 0, i), _item(i, 1)))
    all_sales = sales.list_sales()
    assert len(all_sales) == 1200
    assert all(len(s.items) == 1 for s in all_sales)
    assert all_sales[-1].items[0].product_id == 1200


def test_committed_sales_are_immutable(conn, sales):
    sid = sales.append(_sale(datetime(2026, 1, 1), _item(1, 1)))
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("UPDATE sales SET final_amount=0 WHERE sale_id=?", (sid,))
    conn.rollback()
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("DELETE FROM sale_items WHERE sale_id=?", (sid,))
    conn.rollback()
    assert sales.get(sid).final_amount == 10.0


def test_append_notifies_sales_tables(sales, notifier):
    seen = []
    notifier.tablesChanged.connect(seen.append)
    sales.append(_sale(datetime(2026, 1, 1), _item(1, 1)))
    assert seen == [frozenset({"sales", "sale_items"})]

from __future__ import annotations

import threading
from datetime import datetime

import pytest

from stock_ledger.errors import InsufficientStockError, NotFoundError, ValidationError


def test_create_assigns_id_and_created_at(products):
    before = datetime.now()
    pid = products.create("Soap", "Lavender", 1.5, 2.25, 12, "Hygiene")
    p = products.get(pid)

    assert isinstance(pid, int)
    assert p.name == "Soap"
    assert p.description == "Lavender"
    assert p.wholesale_price == 1.5
    assert p.selling_price == 2.25
    assert p.stock == 12
    assert p.category == "Hygiene"
    assert before <= p.created_at <= datetime.now()


def test_create_accepts_numeric_strings_and_empty_description(products):
    pid = products.create("Rice", None, "10", "12.5", "3", "Food")
    p = products.get(pid)
    assert (p.description, p.wholesale_price, p.selling_price, p.stock) == ("", 10.0, 12.5, 3)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": ""},
        {"name": "   "},
        {"category": ""},
        {"wholesale_price": -1},
        {"selling_price": -0.01},
        {"stock": -1},
        {"stock": 2.5},
        {"stock": True},
        {"wholesale_price": "abc"},
        {"selling_price": None},
    ],
)
def test_create_rejects_invalid_fields(products, kwargs):
    base = dict(
        name="Tea", description="", wholesale_price=1, selling_price=2, stock=1, category="Drinks"
    )
    base.update(kwargs)
    with pytest.raises(ValidationError):
        products.create(**base)
    assert products.list_products() == []


def test_list_is_insertion_order_and_idempotent(products, make_product):
    ids = [make_product(name=n) for n in ("C", "A", "B")]
    first = products.list_products()
    assert [p.product_id for p in first] == ids
    assert products.list_products() == first


def test_get_unknown_returns_none(products):
    assert products.get(999) is None


def test_update_is_partial(products, make_product):
    pid = make_product(name="Pen", selling=2.0, stock=4)
    products.update(pid, selling_price=2.5)
    p = products.get(pid)
    assert p.selling_price == 2.5
    assert p.name == "Pen"
    assert p.stock == 4


def test_update_validates_changed_fields(products, make_product):
    pid = make_product()
    with pytest.raises(ValidationError):
        products.update(pid, name=" ")
    with pytest.raises(ValidationError):
        products.update(pid, selling_price=-5)
    assert products.get(pid).selling_price == 150.0


def test_update_rejects_unknown_or_immutable_fields(products, make_product):
    pid = make_product()
    with pytest.raises(ValidationError):
        products.update(pid, created_at=datetime.now())
    with pytest.raises(ValidationError):
        products.update(pid, product_id=42)
    with pytest.raises(ValidationError):
        products.update(pid, colour="red")


def test_update_unknown_id(products):
    with pytest.raises(NotFoundError):
        products.update(404, name="Nope")


def test_delete(products, make_product):
    pid = make_product()
    products.delete(pid)
    assert products.get(pid) is None
    with pytest.raises(NotFoundError):
        products.delete(pid)


def test_search_matches_name_or_category_case_insensitive(products, make_product):
    a = make_product(name="Green Tea", category="Drinks")
    b = make_product(name="Coffee", category="drinks")
    make_product(name="Bread", category="Bakery")
    c = make_product(name="50%_off mug", category="Kitchen")

    assert [p.product_id for p in products.search("TEA")] == [a]
    assert [p.product_id for p in products.search("drinks")] == [a, b]
    assert [p.product_id for p in products.search("%_")] == [c]
    assert len(products.search("   ")) == 4


def test_adjust_stock_applies_delta(products, make_product):
    pid = make_product(stock=5)
    assert products.adjust_stock(pid, 3) == 8
    assert products.adjust_stock(pid, -8) == 0
    assert products.get(pid).stock == 0


def test_adjust_stock_refuses_to_go_negative(products, make_product):
    pid = make_product(stock=2, name="Lamp")
    with pytest.raises(InsufficientStockError) as info:
        products.adjust_stock(pid, -3)
    assert info.value.product_id == pid
    assert info.value.requested == 3
    assert info.value.available == 2
    assert "Lamp" in str(info.value)
    assert products.get(pid).stock == 2


def test_adjust_stock_unknown_product(products):
    with pytest.raises(NotFoundError):
        products.adjust_stock(999, -1)


def test_adjust_stock_rejects_fractional_delta(products, make_product):
    pid = make_product(stock=2)
    with pytest.raises(ValidationError):
        products.adjust_stock(pid, -0.5)


def test_concurrent_decrements_never_oversell(db_path, products, make_product):
    from stock_ledger.database import get_connection
    from stock_ledger.database.repositories import ProductsRepo

    pid = make_product(stock=10)
    barrier = threading.Barrier(20)
    ok, refused = [], []

    def worker():
        c = get_connection(db_path)
        try:
            repo = ProductsRepo(c)
            barrier.wait()
            try:
                repo.adjust_stock(pid, -1)
                ok.append(1)
            except InsufficientStockError:
                refused.append(1)
        finally:
            c.close()

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(ok) == 10
    assert len(refused) == 10
    assert products.get(pid).stock == 0


def test_writes_notify_products_table(products, notifier, make_product):
    seen = []
    notifier.tablesChanged.connect(seen.append)
    pid = make_product()
    products.update(pid, name="X")
    products.adjust_stock(pid, 1)
    products.delete(pid)
    assert seen == [frozenset({"products"})] * 4


def test_failed_write_does_not_notify(products, notifier, make_product):
    pid = make_product(stock=1)
    seen = []
    notifier.tablesChanged.connect(seen.append)
    with pytest.raises(InsufficientStockError):
        products.adjust_stock(pid, -2)
    assert seen == []


@pytest.mark.parametrize("stock", [10**20, 2**63, float(2**64), "1e20"])
def test_create_rejects_stock_beyond_sqlite_integer(products, stock):
    with pytest.raises(ValidationError):
        products.create("Bolt", "", 1, 2, stock, "Hardware")
    assert products.list_products() == []


def test_create_accepts_largest_sqlite_integer(products):
    pid = products.create("Bolt", "", 1, 2, 2**63 - 1, "Hardware")
    assert products.get(pid).stock == 2**63 - 1


@pytest.mark.parametrize("delta", [10**20, -(10**20), 2**63])
def test_adjust_stock_rejects_delta_beyond_sqlite_integer(products, make_product, delta):
    pid = make_product(stock=3)
    with pytest.raises(ValidationError):
        products.adjust_stock(pid, delta)
    assert products.get(pid).stock == 3


def test_adjust_stock_refuses_to_overflow_stock(products, make_product):
    pid = make_product(stock=2**63 - 2)
    assert products.adjust_stock(pid, 1) == 2**63 - 1
    with pytest.raises(ValidationError):
        products.adjust_stock(pid, 1)
    assert products.get(pid).stock == 2**63 - 1


def test_update_unknown_id_wins_over_bad_fields(products):
    with pytest.raises(NotFoundError):
        products.update(9999, name="")
    with pytest.raises(NotFoundError):
        products.update(9999, colour="red")

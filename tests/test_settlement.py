"""Settlement engine tests run directly against the services layer."""

import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.exceptions import (
    InsufficientBalance,
    InsufficientStock,
    InvalidCart,
    PersistenceFailure,
    ProductNotFound,
    StudentNotFound,
)
from app.models import InventoryLog, Product, Sale, Student
from app.services import settlement
from app.services.settlement import LineItem, settle
from tests.factories import create_category, create_product, create_student

SELLER = "seller-1"


def line(product, quantity, price):
    return LineItem(product_id=product.id, quantity=quantity, unit_price=Decimal(price))


def snapshot(db):
    """Everything a settlement may touch, read fresh from the database."""
    db.expire_all()
    return {
        "balances": {s.id: s.balance for s in db.query(Student).all()},
        "stock": {p.id: p.stock for p in db.query(Product).all()},
        "logs": db.query(InventoryLog).count(),
        "sales": db.query(Sale).count(),
    }


@pytest.fixture
def products(db, category):
    x = create_product(db, category, name="Biscuits", price="50.00", stock=10)
    y = create_product(db, category, name="Juice", price="100.00", stock=5)
    return x, y


# =============================================================================
# SUCCESSFUL SETTLEMENT
# =============================================================================

def test_sale_debits_balance_decrements_stock_and_logs(db, student, products):
    x, y = products

    sale = settle(db, student.id, [line(x, 2, "50.00"), line(y, 1, "100.00")], SELLER)

    assert sale.status == "completed"
    assert sale.total_amount == Decimal("200.00")
    assert sale.student_id == student.id
    assert sale.seller_id == SELLER
    assert [(i.product_id, i.quantity, i.price) for i in sale.items] == [
        (x.id, 2, Decimal("50.00")),
        (y.id, 1, Decimal("100.00")),
    ]

    db.expire_all()
    assert student.balance == Decimal("300.00")
    assert x.stock == 8
    assert y.stock == 4

    logs = {log.product_id: log for log in db.query(InventoryLog).all()}
    assert len(logs) == 2
    assert (logs[x.id].previous_stock, logs[x.id].new_stock, logs[x.id].quantity_change) == (10, 8, -2)
    assert (logs[y.id].previous_stock, logs[y.id].new_stock, logs[y.id].quantity_change) == (5, 4, -1)

    for log in logs.values():
        assert log.action == "sale"
        assert log.reason == f"Sale - Transaction #{sale.id}"
        assert log.user_id == SELLER
        assert log.new_stock - log.previous_stock == log.quantity_change


def test_student_resolved_by_roll_number(db, student, products):
    x, _ = products

    sale = settle(db, student.roll_number, [line(x, 1, "50.00")], SELLER)

    assert sale.student_id == student.id
    db.expire_all()
    assert student.balance == Decimal("450.00")


def test_sale_may_spend_exact_balance(db, category):
    student = create_student(db, roll_number="R-EXACT", balance="100.00")
    x = create_product(db, category, price="25.00", stock=4)

    settle(db, student.id, [line(x, 4, "25.00")], SELLER)

    db.expire_all()
    assert student.balance == Decimal("0.00")
    assert x.stock == 0


def test_total_is_exact_in_cents(db, student, category):
    x = create_product(db, category, name="Candy", price="0.10", stock=100)
    y = create_product(db, category, name="Gum", price="0.20", stock=100)

    sale = settle(db, student.id, [line(x, 3, "0.10"), line(y, 7, "0.20")], SELLER)

    assert sale.total_amount == Decimal("1.70")
    assert sum(item.line_total for item in sale.items) == sale.total_amount


def test_cart_price_is_used_by_default(db, student, products):
    x, _ = products

    sale = settle(db, student.id, [line(x, 1, "45.00")], SELLER)

    assert sale.total_amount == Decimal("45.00")


def test_catalog_price_policy_reprices_lines(db, student, products, monkeypatch):
    x, _ = products
    monkeypatch.setattr(settings, "SETTLEMENT_PRICE_SOURCE", "catalog")

    sale = settle(db, student.id, [line(x, 2, "1.00")], SELLER)

    assert sale.total_amount == Decimal("100.00")
    assert sale.items[0].price == Decimal("50.00")


def test_repeated_product_lines_are_merged_for_stock(db, student, products):
    x, _ = products

    sale = settle(db, student.id, [line(x, 1, "50.00"), line(x, 2, "45.00")], SELLER)

    assert sale.total_amount == Decimal("140.00")
    assert [(i.product_id, i.quantity, i.price) for i in sale.items] == [
        (x.id, 1, Decimal("50.00")),
        (x.id, 2, Decimal("45.00")),
    ]

    db.expire_all()
    assert student.balance == Decimal("360.00")
    assert x.stock == 7

    log = db.query(InventoryLog).one()
    assert (log.product_id, log.previous_stock, log.new_stock, log.quantity_change) == (x.id, 10, 7, -3)


def test_repeated_product_lines_are_checked_against_summed_stock(db, student, category):
    x = create_product(db, category, name="Biscuits", stock=3)
    before = snapshot(db)

    with pytest.raises(InsufficientStock) as exc_info:
        settle(db, student.id, [line(x, 2, "50.00"), line(x, 2, "50.00")], SELLER)

    assert exc_info.value.requested == 4
    assert exc_info.value.available == 3
    assert snapshot(db) == before


# =============================================================================
# REJECTIONS LEAVE EVERYTHING UNTOUCHED
# =============================================================================

def test_insufficient_stock_names_product(db, student, category):
    x = create_product(db, category, name="Biscuits", stock=1)
    before = snapshot(db)

    with pytest.raises(InsufficientStock) as exc_info:
        settle(db, student.id, [line(x, 2, "50.00")], SELLER)

    assert exc_info.value.product_id == x.id
    assert exc_info.value.message == "Insufficient stock for Biscuits"
    assert snapshot(db) == before


def test_insufficient_balance_is_checked_after_stock(db, category):
    student = create_student(db, roll_number="R-POOR", balance="10.00")
    x = create_product(db, category, stock=10)
    y = create_product(db, category, name="Juice", price="100.00", stock=5)
    before = snapshot(db)

    with pytest.raises(InsufficientBalance):
        settle(db, student.id, [line(x, 2, "50.00"), line(y, 1, "100.00")], SELLER)

    assert snapshot(db) == before


def test_stock_failure_wins_over_balance_failure(db, category):
    student = create_student(db, roll_number="R-POOR", balance="10.00")
    x = create_product(db, category, stock=1)

    with pytest.raises(InsufficientStock):
        settle(db, student.id, [line(x, 5, "50.00")], SELLER)


def test_unknown_student(db, products):
    x, _ = products
    before = snapshot(db)

    with pytest.raises(StudentNotFound):
        settle(db, "no-such-student", [line(x, 1, "50.00")], SELLER)

    assert snapshot(db) == before


def test_unknown_product_is_named(db, student, products):
    x, _ = products
    before = snapshot(db)
    missing = LineItem(product_id="missing-product", quantity=1, unit_price=Decimal("5.00"))

    with pytest.raises(ProductNotFound) as exc_info:
        settle(db, student.id, [line(x, 1, "50.00"), missing], SELLER)

    assert exc_info.value.product_id == "missing-product"
    assert "missing-product" in exc_info.value.message
    assert snapshot(db) == before


def test_rejection_is_repeatable_without_side_effects(db, student, category):
    x = create_product(db, category, stock=1)
    before = snapshot(db)

    errors = []
    for _ in range(2):
        with pytest.raises(InsufficientStock) as exc_info:
            settle(db, student.id, [line(x, 3, "50.00")], SELLER)
        errors.append(exc_info.value.message)

    assert errors[0] == errors[1]
    assert snapshot(db) == before


@pytest.mark.parametrize(
    "items_factory",
    [
        lambda x: [],
        lambda x: [LineItem(x.id, 0, Decimal("1.00"))],
        lambda x: [LineItem(x.id, 1, Decimal("-1.00"))],
        lambda x: [LineItem(x.id, 1, Decimal("1.005"))],
    ],
    ids=["empty", "zero-quantity", "negative-price", "sub-cent-price"],
)
def test_invalid_cart_is_rejected_before_lookup(db, student, products, items_factory):
    x, _ = products
    before = snapshot(db)

    with pytest.raises(InvalidCart):
        settle(db, student.id, items_factory(x), SELLER)

    assert snapshot(db) == before


def test_failure_during_commit_rolls_back_everything(db, student, products, monkeypatch):
    x, y = products
    before = snapshot(db)

    real_record = settlement.record_stock_change
    calls = []

    def failing_record(*args, **kwargs):
        calls.append(args)
        if len(calls) == 2:
            raise SQLAlchemyError("disk full")
        return real_record(*args, **kwargs)

    monkeypatch.setattr(settlement, "record_stock_change", failing_record)

    with pytest.raises(PersistenceFailure):
        settle(db, student.id, [line(x, 2, "50.00"), line(y, 1, "100.00")], SELLER)

    assert snapshot(db) == before


# =============================================================================
# CONCURRENCY
# =============================================================================

@pytest.fixture
def contested(file_session_factory):
    """Two students with money and a product with a single unit left."""
    session = file_session_factory()
    category = create_category(session)
    product = create_product(session, category, name="Last Sandwich", price="30.00", stock=1)
    first = create_student(session, roll_number="R-101", balance="100.00")
    second = create_student(session, roll_number="R-102", balance="100.00")
    ids = (product.id, first.id, second.id)
    session.close()
    return ids


def test_stale_sale_is_retried_and_rejected(file_session_factory, contested, monkeypatch):
    product_id, first_id, second_id = contested
    item = LineItem(product_id=product_id, quantity=1, unit_price=Decimal("30.00"))

    real_load = settlement._load_products
    interfered = []

    def load_then_sell_elsewhere(db, product_ids):
        products = real_load(db, product_ids)
        if not interfered:
            # Another till sells the last unit after this one has read it
            interfered.append(True)
            other = file_session_factory()
            try:
                settle(other, second_id, [item], "seller-2")
            finally:
                other.close()
        return products

    monkeypatch.setattr(settlement, "_load_products", load_then_sell_elsewhere)

    db = file_session_factory()
    try:
        with pytest.raises(InsufficientStock):
            settle(db, first_id, [item], SELLER)
    finally:
        db.close()

    check = file_session_factory()
    try:
        assert check.get(Product, product_id).stock == 0
        assert check.query(Sale).count() == 1
        assert check.query(Sale).one().student_id == second_id
        assert check.get(Student, first_id).balance == Decimal("100.00")
        assert check.query(InventoryLog).count() == 1
    finally:
        check.close()


def test_concurrent_sales_never_oversell(file_session_factory, contested):
    product_id, first_id, second_id = contested
    item = LineItem(product_id=product_id, quantity=1, unit_price=Decimal("30.00"))
    barrier = threading.Barrier(2)

    def buy(student_id):
        db = file_session_factory()
        try:
            barrier.wait()
            settle(db, student_id, [item], SELLER, attempts=5)
            return "sold"
        except InsufficientStock:
            return "out of stock"
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = sorted(pool.map(buy, [first_id, second_id]))

    assert outcomes == ["out of stock", "sold"]

    check = file_session_factory()
    try:
        assert check.get(Product, product_id).stock == 0
        assert check.query(Sale).count() == 1
        assert check.query(InventoryLog).count() == 1
    finally:
        check.close()


def test_concurrent_sales_never_overdraw_balance(file_session_factory):
    session = file_session_factory()
    category = create_category(session)
    first = create_product(session, category, name="Notebook", price="60.00", stock=10)
    second = create_product(session, category, name="Torch", price="60.00", stock=10)
    student = create_student(session, roll_number="R-201", balance="100.00")
    product_ids, student_id = (first.id, second.id), student.id
    session.close()

    barrier = threading.Barrier(2)

    def buy(product_id):
        db = file_session_factory()
        try:
            barrier.wait()
            item = LineItem(product_id=product_id, quantity=1, unit_price=Decimal("60.00"))
            settle(db, student_id, [item], SELLER, attempts=5)
            return "sold"
        except InsufficientBalance:
            return "insufficient balance"
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = sorted(pool.map(buy, product_ids))

    assert outcomes == ["insufficient balance", "sold"]

    check = file_session_factory()
    try:
        assert check.get(Student, student_id).balance == Decimal("40.00")
        assert check.query(Sale).count() == 1
        assert sorted(check.get(Product, pid).stock for pid in product_ids) == [9, 10]
    finally:
        check.close()

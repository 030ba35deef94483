"""
Transaction settlement.

Given a student and a cart, either commit a sale that leaves balances, stock
and the inventory log consistent with each other, or reject it with nothing
applied.

Guarantees:

- All validation (student, products, stock, balance) runs before the first
  write, so a rejected cart leaves every row untouched.
- The sale record, the balance debit, every stock decrement and every
  inventory log entry are committed in one database transaction.
- Student and product rows are locked for the duration of the transaction
  where the backend supports ``SELECT ... FOR UPDATE``, and both carry a
  version counter. A sale that validated against a row someone else changed
  in the meantime fails its version check, is rolled back and re-validated
  from scratch (see ``app.services.transactional``). Two sales can therefore
  never both spend the last unit of stock or the last of a balance.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    InsufficientBalance,
    InsufficientStock,
    InvalidCart,
    ProductNotFound,
    StudentNotFound,
)
from app.core.money import to_money
from app.models.products import Product
from app.models.sale_items import SaleItem
from app.models.sales import Sale
from app.models.students import Student
from app.services.stock import SALE, record_stock_change
from app.services.transactional import run_atomic

logger = logging.getLogger(__name__)

COMPLETED = "completed"


@dataclass(frozen=True)
class LineItem:
    product_id: str
    quantity: int
    unit_price: Decimal


def _check_cart(items: list[LineItem]):
    if not items:
        raise InvalidCart("Sale must contain items")

    for item in items:
        if item.quantity is None or item.quantity <= 0:
            raise InvalidCart("Item quantity must be greater than zero")

        if item.unit_price is None or item.unit_price < 0:
            raise InvalidCart("Item price cannot be negative")

        if to_money(item.unit_price) != item.unit_price:
            raise InvalidCart("Item price cannot have more than two decimal places")


def resolve_student(db: Session, student_ref: str, lock: bool = False) -> Student:
    """Find a student by primary id, falling back to roll number."""
    for column in (Student.id, Student.roll_number):
        query = db.query(Student).filter(column == student_ref)
        if lock:
            query = query.with_for_update().populate_existing()

        student = query.first()
        if student:
            return student

    raise StudentNotFound(student_ref)


def _load_products(db: Session, product_ids: list[str]) -> dict[str, Product]:
    # One locking query in id order so concurrent carts lock rows in the
    # same sequence
    products = (
        db.query(Product)
        .filter(Product.id.in_(product_ids))
        .order_by(Product.id)
        .with_for_update()
        .populate_existing()
        .all()
    )

    return {product.id: product for product in products}


def _price_lines(items: list[LineItem], products: dict[str, Product]):
    """Check the cart against current stock.

    Returns the priced lines, the quantity taken per product (a product may
    appear on several lines) and the sale total.
    """
    requested = {}
    for item in items:
        if item.product_id not in products:
            raise ProductNotFound(item.product_id)
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

    for product_id, quantity in requested.items():
        product = products[product_id]
        if product.stock < quantity:
            raise InsufficientStock(product.id, product.name, quantity, product.stock)

    priced = []
    total_amount = Decimal("0.00")

    for item in items:
        product = products[item.product_id]

        if settings.SETTLEMENT_PRICE_SOURCE == "catalog":
            unit_price = to_money(product.price)
        else:
            unit_price = to_money(item.unit_price)

        line_total = unit_price * item.quantity
        total_amount += line_total

        priced.append((item, product, unit_price, line_total))

    return priced, requested, to_money(total_amount)


def _settle_once(db: Session, student_ref: str, items: list[LineItem], seller_id: str) -> Sale:
    student = resolve_student(db, student_ref, lock=True)

    products = _load_products(db, [item.product_id for item in items])
    priced, requested, total_amount = _price_lines(items, products)

    if student.balance < total_amount:
        raise InsufficientBalance(student.id, total_amount, student.balance)

    # ===============================
    # COMMIT PHASE
    # ===============================
    sale = Sale(
        student_id=student.id,
        seller_id=seller_id,
        total_amount=total_amount,
        status=COMPLETED,
    )
    db.add(sale)
    db.flush()

    student.balance = to_money(student.balance - total_amount)

    for position, (item, product, unit_price, line_total) in enumerate(priced):
        sale.items.append(
            SaleItem(
                product_id=product.id,
                position=position,
                quantity=item.quantity,
                price=unit_price,
                line_total=line_total,
            )
        )

    # One log entry per product, however many lines it appears on
    for product_id, quantity in requested.items():
        record_stock_change(
            db,
            products[product_id],
            -quantity,
            SALE,
            f"Sale - Transaction #{sale.id}",
            seller_id,
        )

    return sale


def settle(
    db: Session,
    student_ref: str,
    items: list[LineItem],
    seller_id: str,
    attempts: int | None = None,
) -> Sale:
    """
    Settle a cart for a student.

    ``student_ref`` may be the student's id or roll number. ``seller_id`` is
    recorded on the sale and on each inventory log entry.

    Returns the committed ``Sale``. Raises ``StudentNotFound``,
    ``ProductNotFound``, ``InsufficientStock``, ``InsufficientBalance`` or
    ``InvalidCart`` when the cart is rejected, and ``PersistenceFailure`` when
    the store fails; in every case nothing has been applied.
    """
    _check_cart(items)

    try:
        sale = run_atomic(
            db,
            lambda: _settle_once(db, student_ref, items, seller_id),
            attempts=attempts or settings.SETTLEMENT_MAX_ATTEMPTS,
            label=f"Settlement for student {student_ref}",
        )
    except (InsufficientStock, InsufficientBalance, ProductNotFound, StudentNotFound) as exc:
        logger.info("Sale rejected for student=%s: %s", student_ref, exc.message)
        raise

    db.refresh(sale)

    logger.info(
        "Sale %s settled: student=%s items=%s total=%s",
        sale.id, sale.student_id, len(items), sale.total_amount,
    )

    return sale

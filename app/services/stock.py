"""
Restock and manual stock adjustment.

Every stock change, including the ones the settlement engine makes, goes
through ``record_stock_change`` so that the product row and its inventory
log entry are always written in the same unit of work.
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidStockChange, ProductNotFound
from app.models.inventory_logs import InventoryLog
from app.models.products import Product
from app.services.transactional import run_atomic

logger = logging.getLogger(__name__)

SALE = "sale"
RESTOCK = "restock"
ADJUSTMENT = "adjustment"


def record_stock_change(
    db: Session,
    product: Product,
    quantity_change: int,
    action: str,
    reason: str,
    user_id: str | None = None,
) -> InventoryLog:
    """Apply a signed stock delta to a loaded product and stage its log entry.

    Nothing is flushed here; the caller owns the transaction.
    """
    previous_stock = product.stock
    new_stock = previous_stock + quantity_change

    if new_stock < 0:
        raise InvalidStockChange(
            product.id,
            f"Stock for {product.name} cannot go below zero",
        )

    product.stock = new_stock

    log = InventoryLog(
        product_id=product.id,
        action=action,
        quantity_change=quantity_change,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reason=reason,
        user_id=user_id,
    )
    db.add(log)

    return log


def _lock_product(db: Session, product_id: str) -> Product:
    product = (
        db.query(Product)
        .filter(Product.id == product_id)
        .with_for_update()
        .populate_existing()
        .first()
    )

    if not product:
        raise ProductNotFound(product_id)

    return product


def restock(db: Session, product_id: str, quantity: int, reason: str, user_id: str | None = None):
    if quantity <= 0:
        raise InvalidStockChange(product_id, "Restock quantity must be greater than zero")

    def operation():
        product = _lock_product(db, product_id)
        log = record_stock_change(db, product, quantity, RESTOCK, reason or "Restock", user_id)
        return product, log

    product, log = run_atomic(
        db,
        operation,
        attempts=settings.SETTLEMENT_MAX_ATTEMPTS,
        label=f"Restock of product {product_id}",
    )

    logger.info(
        "Restocked product=%s by %s (%s -> %s)",
        product_id, quantity, log.previous_stock, log.new_stock,
    )

    return product, log


def adjust_stock(db: Session, product_id: str, quantity_change: int, reason: str, user_id: str | None = None):
    if quantity_change == 0:
        raise InvalidStockChange(product_id, "Adjustment must change the stock level")

    if not reason or not reason.strip():
        raise InvalidStockChange(product_id, "A reason is required for stock adjustments")

    def operation():
        product = _lock_product(db, product_id)
        log = record_stock_change(db, product, quantity_change, ADJUSTMENT, reason.strip(), user_id)
        return product, log

    product, log = run_atomic(
        db,
        operation,
        attempts=settings.SETTLEMENT_MAX_ATTEMPTS,
        label=f"Stock adjustment of product {product_id}",
    )

    logger.info(
        "Adjusted product=%s by %s (%s -> %s): %s",
        product_id, quantity_change, log.previous_stock, log.new_stock, log.reason,
    )

    return product, log

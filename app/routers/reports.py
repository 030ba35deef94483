# =========================================================
# REPORTS ROUTER
#
# Dashboard aggregates over completed sales:
# - weekly-sales: items sold per day for the last 7 days,
#   optionally for a single product
# - product-sales: top products by quantity over N days
#
# Schema-safe: always returns every day / Decimal (never None)
# =========================================================

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import timedelta, datetime, timezone
from decimal import Decimal
from typing import Optional

from app.database import get_db
from app.models.sales import Sale
from app.models.sale_items import SaleItem
from app.models.products import Product
from app.schemas.report import (
    DailyItemsSold,
    WeeklySalesResponse,
    ProductSalesReportResponse,
    ProductSalesResponse,
)

router = APIRouter(prefix="/reports", tags=["Reports"])

COMPLETED = "completed"


# Days are calendar days in UTC
def _window_start(day):
    return datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)


def _utc_day(value):
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


# =========================================================
# WEEKLY ITEMS SOLD
# =========================================================
@router.get("/weekly-sales", response_model=WeeklySalesResponse)
def weekly_sales(
    product_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    today = datetime.now(timezone.utc).date()
    start_date = today - timedelta(days=6)
    start_dt = _window_start(start_date)

    query = (
        db.query(Sale.created_at, SaleItem.quantity)
        .join(SaleItem, SaleItem.sale_id == Sale.id)
        .filter(
            Sale.status == COMPLETED,
            Sale.created_at >= start_dt,
        )
    )

    if product_id and product_id != "all":
        query = query.filter(SaleItem.product_id == product_id)

    # Every day of the window is reported, even with no sales
    daily = {start_date + timedelta(days=offset): 0 for offset in range(7)}

    for created_at, quantity in query.all():
        day = _utc_day(created_at)
        if day in daily:
            daily[day] += quantity

    return WeeklySalesResponse(
        product_id=product_id if product_id != "all" else None,
        results=[
            DailyItemsSold(date=day, day=day.strftime("%a"), items=items)
            for day, items in daily.items()
        ],
    )


# =========================================================
# TOP PRODUCT SALES
# =========================================================
@router.get("/product-sales", response_model=ProductSalesReportResponse)
def product_sales(
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    start_date = datetime.now(timezone.utc).date() - timedelta(days=days)
    start_dt = _window_start(start_date)

    quantity_sold = func.sum(SaleItem.quantity).label("quantity")
    revenue = func.sum(SaleItem.line_total).label("revenue")

    rows = (
        db.query(
            Product.id,
            Product.name,
            quantity_sold,
            revenue,
        )
        .join(SaleItem, SaleItem.product_id == Product.id)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(
            Sale.status == COMPLETED,
            Sale.created_at >= start_dt,
        )
        .group_by(Product.id, Product.name)
        .order_by(quantity_sold.desc())
        .limit(10)
        .all()
    )

    return ProductSalesReportResponse(
        days=days,
        results=[
            ProductSalesResponse(
                product_id=row.id,
                name=row.name,
                quantity=int(row.quantity or 0),
                revenue=Decimal(str(row.revenue or 0)).quantize(Decimal("0.01")),
            )
            for row in rows
        ],
    )

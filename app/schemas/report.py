# schemas/report.py

from pydantic import BaseModel
from datetime import date as Date
from decimal import Decimal
from typing import List


class DailyItemsSold(BaseModel):
    date: Date
    day: str
    items: int


class WeeklySalesResponse(BaseModel):
    product_id: str | None
    results: List[DailyItemsSold]


class ProductSalesResponse(BaseModel):
    product_id: str
    name: str
    quantity: int
    revenue: Decimal


class ProductSalesReportResponse(BaseModel):
    days: int
    results: List[ProductSalesResponse]

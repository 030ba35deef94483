# schemas/sale.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List
from decimal import Decimal

class SaleItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        decimal_places=2,
        description="Unit price captured when the item was added to the cart",
    )

class SaleCreate(BaseModel):
    student_ref: str = Field(..., min_length=1, description="Student id or roll number")
    items: List[SaleItemCreate] = Field(..., min_length=1)

class SaleItemResponse(BaseModel):
    product_id: str
    quantity: int
    price: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True

class SaleResponse(BaseModel):
    id: str
    student_id: str
    seller_id: str
    total_amount: Decimal
    status: str
    created_at: datetime
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True

from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category_id: str

    price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        decimal_places=2,
        description="Price must be below 100 million"
    )

    stock: int = Field(0, ge=0, description="Opening stock, logged as a restock")
    low_stock_threshold: int = Field(10, ge=0)
    barcode: str | None = None
    description: str | None = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    # Stock is deliberately absent: it only moves through sales and /inventory
    name: str | None = None
    category_id: str | None = None
    price: Decimal | None = Field(None, ge=0, lt=100_000_000, decimal_places=2)
    low_stock_threshold: int | None = Field(None, ge=0)
    barcode: str | None = None
    description: str | None = None
    is_active: bool | None = None

class ProductResponse(BaseModel):
    id: str
    name: str
    category_id: str
    price: Decimal
    stock: int
    low_stock_threshold: int
    barcode: str | None
    description: str | None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

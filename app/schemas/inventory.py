from pydantic import BaseModel, Field
from datetime import datetime


class RestockCreate(BaseModel):
    quantity: int = Field(..., gt=0)
    reason: str | None = Field(None, max_length=200)


class StockAdjustmentCreate(BaseModel):
    quantity_change: int = Field(..., description="Signed change, must not be zero")
    reason: str = Field(..., min_length=1, max_length=200)


class InventoryLogResponse(BaseModel):
    id: str
    product_id: str
    action: str
    quantity_change: int
    previous_stock: int
    new_stock: int
    reason: str
    user_id: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class StockChangeResponse(BaseModel):
    product_id: str
    stock: int
    log: InventoryLogResponse

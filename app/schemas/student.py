from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    roll_number: str = Field(..., min_length=1)
    standard: str = Field(..., min_length=1, description="Class or grade")
    year: int = Field(..., ge=1900, le=2200, description="Enrollment year")

    balance: Decimal = Field(
        Decimal("0.00"),
        ge=0,
        lt=100_000_000,
        decimal_places=2,
        description="Opening balance",
    )

    status: Literal["active", "inactive"] = "active"


class StudentUpdate(BaseModel):
    name: str | None = None
    roll_number: str | None = None
    standard: str | None = None
    year: int | None = Field(None, ge=1900, le=2200)
    status: Literal["active", "inactive"] | None = None


class BalanceAdjustmentCreate(BaseModel):
    amount: Decimal = Field(
        ...,
        gt=-100_000_000,
        lt=100_000_000,
        decimal_places=2,
        description="Positive to top up, negative to deduct",
    )
    reason: str | None = Field(None, max_length=200)


class StudentResponse(BaseModel):
    id: str
    name: str
    roll_number: str
    standard: str
    year: int
    balance: Decimal
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceAdjustmentResponse(BaseModel):
    id: str
    student_id: str
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal
    reason: str | None
    performed_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class StudentBalanceResponse(BaseModel):
    student: StudentResponse
    adjustment: BalanceAdjustmentResponse

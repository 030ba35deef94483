# app/models/balance_adjustments.py

import uuid

from sqlalchemy import CheckConstraint, Column, String, Numeric, DateTime
from sqlalchemy.sql import func

from app.database import Base


class BalanceAdjustment(Base):
    __tablename__ = "balance_adjustments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    student_id = Column(String(36), nullable=False, index=True)

    # Positive for a top-up, negative for a deduction
    amount = Column(Numeric(10, 2), nullable=False)
    previous_balance = Column(Numeric(10, 2), nullable=False)
    new_balance = Column(Numeric(10, 2), nullable=False)

    reason = Column(String, nullable=True)
    performed_by = Column(String, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("amount <> 0", name="ck_balance_adjustment_non_zero"),
    )

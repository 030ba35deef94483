# models/sales.py

import uuid

from sqlalchemy import CheckConstraint, Column, Index, DateTime, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Plain references: the record outlives a hard-deleted student
    student_id = Column(String(36), nullable=False, index=True)
    seller_id = Column(String, nullable=False)

    total_amount = Column(Numeric(10, 2), nullable=False)

    # Only "completed" is ever written; the others are reserved for refunds
    status = Column(String, nullable=False, default="completed")

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.position",
    )

    __table_args__ = (
        Index("ix_sales_status_created", "status", "created_at"),
        CheckConstraint("total_amount >= 0", name="ck_sale_total_non_negative"),
        CheckConstraint(
            "status IN ('completed', 'failed', 'refunded')",
            name="ck_sale_status_valid",
        ),
    )

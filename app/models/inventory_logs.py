# app/models/inventory_logs.py

import uuid

from sqlalchemy import CheckConstraint, Column, Index, Integer, String, DateTime
from sqlalchemy.sql import func

from app.database import Base


class InventoryLog(Base):
    __tablename__ = "inventory_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    product_id = Column(String(36), nullable=False, index=True)
    action = Column(String, nullable=False)

    quantity_change = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)

    reason = Column(String, nullable=False)
    user_id = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_inventory_logs_action_created", "action", "created_at"),
        CheckConstraint(
            "action IN ('sale', 'restock', 'adjustment')",
            name="ck_inventory_log_action_valid",
        ),
        CheckConstraint(
            "new_stock = previous_stock + quantity_change",
            name="ck_inventory_log_stock_delta",
        ),
        CheckConstraint("new_stock >= 0", name="ck_inventory_log_new_stock_non_negative"),
    )

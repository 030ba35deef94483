# app/models/students.py

import uuid

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func

from app.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    roll_number = Column(String, unique=True, index=True, nullable=False)
    standard = Column(String, nullable=False)
    year = Column(Integer, nullable=False)

    # May go negative through an administrative deduction, never through a sale
    balance = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(String, nullable=False, default="active")

    version = Column(Integer, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive')", name="ck_student_status_valid"),
    )

"""
Administrative balance top-ups and deductions.

Unlike a sale, a deduction may take a balance below zero (it can be a
penalty). Deductions carry a reason and are capped at ``MAX_DEDUCTION``.
Every change is written to ``balance_adjustments`` in the same transaction
as the balance itself.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidBalanceAdjustment, StudentNotFound
from app.core.money import MAX_AMOUNT, to_money
from app.models.balance_adjustments import BalanceAdjustment
from app.models.students import Student
from app.services.transactional import run_atomic

logger = logging.getLogger(__name__)


def adjust_balance(
    db: Session,
    student_id: str,
    amount: Decimal,
    reason: str | None,
    performed_by: str,
):
    amount = Decimal(amount)

    if amount == 0:
        raise InvalidBalanceAdjustment("Amount must not be zero")

    if to_money(amount) != amount:
        raise InvalidBalanceAdjustment("Amount cannot have more than two decimal places")

    reason = reason.strip() if reason else None

    if amount < 0 and not reason:
        raise InvalidBalanceAdjustment("A reason is required for deductions")

    if -amount > settings.MAX_DEDUCTION:
        raise InvalidBalanceAdjustment(f"Maximum deduction amount is {settings.MAX_DEDUCTION}")

    def operation():
        student = (
            db.query(Student)
            .filter(Student.id == student_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

        if not student:
            raise StudentNotFound(student_id)

        previous_balance = to_money(student.balance)
        new_balance = to_money(previous_balance + amount)

        if abs(new_balance) > MAX_AMOUNT:
            raise InvalidBalanceAdjustment("Resulting balance is out of range")

        student.balance = new_balance

        adjustment = BalanceAdjustment(
            student_id=student.id,
            amount=amount,
            previous_balance=previous_balance,
            new_balance=student.balance,
            reason=reason,
            performed_by=performed_by,
        )
        db.add(adjustment)

        return student, adjustment

    student, adjustment = run_atomic(
        db,
        operation,
        attempts=settings.SETTLEMENT_MAX_ATTEMPTS,
        label=f"Balance adjustment for student {student_id}",
    )

    logger.info(
        "Balance of student=%s adjusted by %s (%s -> %s)",
        student_id, amount, adjustment.previous_balance, adjustment.new_balance,
    )

    return student, adjustment

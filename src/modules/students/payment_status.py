"""Student payment status for a billing period."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from src.core.config import settings


class StudentPaymentStatus(StrEnum):
    """Where a student stands for the period."""

    PAID = "PAID"
    PARTIAL = "PARTIAL"
    UNPAID = "UNPAID"
    UPCOMING = "UPCOMING"
    OVERDUE = "OVERDUE"


def classify_payment_status(
    total_paid: Decimal,
    expected_amount: Decimal,
    due_date: date | None,
    today: date,
) -> StudentPaymentStatus:
    """
    Classify what a student paid in a period against what is expected.

    First match wins:
        1. paid >= expected                    -> PAID (nothing expected is PAID)
        2. no due date                         -> UNPAID / PARTIAL
        3. before the due date                 -> UPCOMING / PARTIAL
        4. overdue_after_days or more past due -> OVERDUE, even if partially paid
        5. otherwise (inside the grace window) -> UNPAID / PARTIAL
    """
    if total_paid >= expected_amount:
        return StudentPaymentStatus.PAID

    has_partial_payment = total_paid > 0
    if due_date is None:
        return StudentPaymentStatus.PARTIAL if has_partial_payment else StudentPaymentStatus.UNPAID

    if today < due_date:
        return StudentPaymentStatus.PARTIAL if has_partial_payment else StudentPaymentStatus.UPCOMING

    days_overdue = (today - due_date).days
    if days_overdue >= settings.overdue_after_days:
        return StudentPaymentStatus.OVERDUE
    return StudentPaymentStatus.PARTIAL if has_partial_payment else StudentPaymentStatus.UNPAID

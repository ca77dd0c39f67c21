"""Billing calendar: due dates, payment periods and date windows."""

from calendar import monthrange
from datetime import date, datetime, time, timedelta

from src.core.config import settings


def _clamped(year: int, month: int, day: int) -> date:
    """date(year, month, day), falling back to the last day of the month."""
    last_day = monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def next_month(year: int, month: int) -> tuple[int, int]:
    """(year, month) of the following month."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def previous_month(year: int, month: int) -> tuple[int, int]:
    """(year, month) of the preceding month."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def compute_due_date(pay_day: int | None, year: int, month: int) -> date:
    """
    Due date of a billing period.

    Without a configured pay day the period is due on the 1st. A pay day that
    does not exist in the month (31 in April, 30 in February) falls on the
    month's last day.
    """
    if pay_day is None:
        return date(year, month, 1)
    return _clamped(year, month, pay_day)


def compute_next_due_date(
    pay_day: int | None,
    year: int,
    month: int,
    today: date | None = None,
) -> date | None:
    """
    Due date of the period, rolled forward one month when it is before today.

    The roll happens once, so a period further in the past still yields a date
    before today. Returns None when the student has no pay day configured.
    """
    if pay_day is None:
        return None
    today = today or date.today()

    due = compute_due_date(pay_day, year, month)
    if due < today:
        due = compute_due_date(pay_day, *next_month(year, month))
    return due


def is_payment_overdue(
    pay_day: int | None,
    year: int,
    month: int,
    today: date | None = None,
) -> bool:
    """True once the period's due date has passed. Never overdue without a pay day."""
    if pay_day is None:
        return False
    today = today or date.today()
    return today > compute_due_date(pay_day, year, month)


def current_payment_period(today: date | None = None) -> tuple[int, int]:
    """
    Billing period reports default to.

    The first days of a month (before ``settings.period_grace_days``) still
    count as the previous month's cycle.
    """
    today = today or date.today()
    if today.day < settings.period_grace_days:
        return previous_month(today.year, today.month)
    return today.year, today.month


def resolve_period(
    year: int | None,
    month: int | None,
    today: date | None = None,
) -> tuple[int, int]:
    """Explicit (year, month) where given, current payment period for the rest."""
    default_year, default_month = current_payment_period(today)
    return (
        year if year is not None else default_year,
        month if month is not None else default_month,
    )


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) datetimes covering one calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def range_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """[start, end) datetimes covering start_date..end_date inclusive."""
    return datetime.combine(start_date, time.min), datetime.combine(
        end_date + timedelta(days=1), time.min
    )


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """[start, end) datetimes covering one calendar month."""
    start = datetime(year, month, 1)
    end_year, end_month = next_month(year, month)
    return start, datetime(end_year, end_month, 1)

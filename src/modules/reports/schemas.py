"""Schemas for financial reports."""

import datetime as dt
from decimal import Decimal
from enum import StrEnum

from src.shared.schemas.base import BaseSchema


class ReportType(StrEnum):
    DAILY_EXPENSE = "DAILY_EXPENSE"
    MONTHLY_EXPENSE = "MONTHLY_EXPENSE"
    RANGE_EXPENSE = "RANGE_EXPENSE"
    ALL_TIME_EXPENSE = "ALL_TIME_EXPENSE"
    DAILY_PAYMENT = "DAILY_PAYMENT"
    MONTHLY_PAYMENT = "MONTHLY_PAYMENT"
    RANGE_PAYMENT = "RANGE_PAYMENT"
    FINANCIAL_SUMMARY = "FINANCIAL_SUMMARY"
    FINANCIAL_SUMMARY_RANGE = "FINANCIAL_SUMMARY_RANGE"


class ReportWindow(BaseSchema):
    """Query parameters echoed back with every report."""

    type: ReportType
    branch_id: int
    date: dt.date | None = None
    year: int | None = None
    month: int | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class ExpenseReportResponse(ReportWindow):
    """Regular expenses and salary disbursements for a window."""

    regular_expenses: Decimal
    salary_expenses: Decimal
    total_expenses: Decimal


class IncomeReportResponse(ReportWindow):
    """Tuition payments and product sales for a window."""

    student_payments: Decimal
    product_sales: Decimal
    total_income: Decimal


class FinancialSummaryResponse(ReportWindow):
    """Income against expenses for a window. net_profit may be negative."""

    student_payments: Decimal
    product_sales: Decimal
    regular_expenses: Decimal
    salary_expenses: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal

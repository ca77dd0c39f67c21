"""Initial schema: branches, teachers, groups, students, payments, salaries, sales, expenses

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _branch_fk() -> sa.Column:
    return sa.Column("branch_id", sa.BigInteger(), sa.ForeignKey("branches.id"), nullable=False)


def _index(table: str, *columns: str) -> None:
    for column in columns:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column])


def upgrade() -> None:
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", sa.BigInteger(), nullable=False),
        sa.Column("branch_id", sa.BigInteger(), nullable=True),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("audit_logs", "action", "entity_type", "branch_id", "created_at")

    op.create_table(
        "branches",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    _index("branches", "created_at")

    op.create_table(
        "teachers",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("teachers", "branch_id", "created_at")

    op.create_table(
        "students",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("parent_phone_number", sa.String(20), nullable=True),
        sa.Column("payment_day_of_month", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("students", "status", "branch_id", "created_at")

    op.create_table(
        "groups",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column(
            "teacher_salary_per_student", sa.Numeric(15, 2), nullable=False, server_default="0"
        ),
        sa.Column("teacher_id", sa.BigInteger(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("days_of_week", sa.String(100), nullable=True),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("groups", "teacher_id", "branch_id", "created_at")

    op.create_table(
        "group_memberships",
        sa.Column("group_id", sa.BigInteger(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("student_id", sa.BigInteger(), sa.ForeignKey("students.id"), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("group_id", "student_id"),
    )
    _index("group_memberships", "student_id")

    op.create_table(
        "payments",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.BigInteger(), sa.ForeignKey("students.id"), nullable=True),
        sa.Column("group_id", sa.BigInteger(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default="tuition"),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        sa.Column("payment_year", sa.Integer(), nullable=False),
        sa.Column("payment_month", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index(
        "payments",
        "student_id",
        "group_id",
        "category",
        "payment_year",
        "payment_month",
        "branch_id",
        "created_at",
    )

    op.create_table(
        "teacher_salary_payments",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("teacher_id", sa.BigInteger(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("teacher_salary_payments", "teacher_id", "year", "month", "branch_id", "created_at")

    op.create_table(
        "product_sales",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("product_name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("student_id", sa.BigInteger(), sa.ForeignKey("students.id"), nullable=True),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("product_sales", "category", "student_id", "branch_id", "created_at")

    op.create_table(
        "expenses",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _branch_fk(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("expenses", "category", "branch_id", "created_at")


def downgrade() -> None:
    for table in (
        "expenses",
        "product_sales",
        "teacher_salary_payments",
        "payments",
        "group_memberships",
        "groups",
        "students",
        "teachers",
        "branches",
        "audit_logs",
    ):
        op.drop_table(table)

"""Service for Product Sales module."""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.branches.service import BranchService
from src.modules.product_sales.models import ProductCategory, ProductSale
from src.modules.product_sales.schemas import (
    CategorySummaryResponse,
    ProductSaleCreate,
    ProductSaleUpdate,
    SalesSummaryResponse,
)
from src.modules.students.models import Student
from src.shared.utils.dates import month_bounds, range_bounds
from src.shared.utils.money import round_money, sum_or_zero


class ProductSaleService:
    """Service for product (merchandise) sales."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_sale(self, data: ProductSaleCreate) -> ProductSale:
        await BranchService(self.db).get_branch_by_id(data.branch_id)
        if data.student_id is not None:
            await self._validate_student(data.student_id, data.branch_id)

        unit_price = round_money(data.unit_price)
        sale = ProductSale(
            product_name=data.product_name,
            description=data.description,
            quantity=data.quantity,
            unit_price=unit_price,
            total_amount=round_money(unit_price * data.quantity),
            category=data.category.value,
            branch_id=data.branch_id,
            student_id=data.student_id,
        )
        self.db.add(sale)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="ProductSale",
            entity_id=sale.id,
            branch_id=sale.branch_id,
            new_values={
                "product_name": sale.product_name,
                "quantity": sale.quantity,
                "total_amount": str(sale.total_amount),
            },
        )

        await self.db.commit()
        return await self.get_sale_by_id(sale.id)

    async def get_sale_by_id(self, sale_id: int) -> ProductSale:
        result = await self.db.execute(
            select(ProductSale)
            .where(ProductSale.id == sale_id)
            .options(selectinload(ProductSale.branch), selectinload(ProductSale.student))
            .execution_options(populate_existing=True)
        )
        sale = result.scalar_one_or_none()
        if not sale:
            raise NotFoundError("ProductSale", sale_id)
        return sale

    async def update_sale(self, sale_id: int, data: ProductSaleUpdate) -> ProductSale:
        """Apply the changes and recompute total_amount."""
        sale = await self.get_sale_by_id(sale_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in ("description", "student_id")
        }

        if changes.get("student_id") is not None:
            await self._validate_student(changes["student_id"], sale.branch_id)
        if changes.get("unit_price") is not None:
            changes["unit_price"] = round_money(changes["unit_price"])
        if changes.get("category") is not None:
            changes["category"] = changes["category"].value

        old_values = {field: str(getattr(sale, field)) for field in changes}
        old_values["total_amount"] = str(sale.total_amount)
        for field, value in changes.items():
            setattr(sale, field, value)
        sale.total_amount = round_money(sale.unit_price * sale.quantity)

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="ProductSale",
            entity_id=sale.id,
            branch_id=sale.branch_id,
            old_values=old_values,
            new_values={
                **{k: str(v) for k, v in changes.items()},
                "total_amount": str(sale.total_amount),
            },
        )

        await self.db.commit()
        return await self.get_sale_by_id(sale_id)

    async def delete_sale(self, sale_id: int) -> None:
        sale = await self.get_sale_by_id(sale_id)
        await self.audit.log(
            action=AuditAction.DELETE,
            entity_type="ProductSale",
            entity_id=sale.id,
            branch_id=sale.branch_id,
            old_values={"product_name": sale.product_name, "total_amount": str(sale.total_amount)},
        )
        await self.db.delete(sale)
        await self.db.commit()

    async def list_sales(
        self, branch_id: int, category: ProductCategory | None = None
    ) -> list[ProductSale]:
        """Sales of a branch, optionally of one category, newest first."""
        query = select(ProductSale).where(ProductSale.branch_id == branch_id)
        if category is not None:
            query = query.where(ProductSale.category == category.value)
        return await self._fetch(query)

    async def list_sales_by_student(self, student_id: int) -> list[ProductSale]:
        return await self._fetch(
            select(ProductSale).where(ProductSale.student_id == student_id)
        )

    async def list_sales_by_date_range(
        self, branch_id: int, start_date: date, end_date: date
    ) -> list[ProductSale]:
        """Sales recorded between start_date and end_date, both inclusive."""
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date", field="end_date")
        start, end = range_bounds(start_date, end_date)
        return await self._fetch(
            select(ProductSale).where(
                ProductSale.branch_id == branch_id,
                ProductSale.created_at >= start,
                ProductSale.created_at < end,
            )
        )

    async def sales_summary(
        self, branch_id: int, year: int | None = None, month: int | None = None
    ) -> SalesSummaryResponse:
        """Total revenue for a calendar month when both year and month are given, else all time."""
        query = select(func.sum(ProductSale.total_amount)).where(
            ProductSale.branch_id == branch_id
        )
        if year is not None and month is not None:
            start, end = month_bounds(year, month)
            query = query.where(ProductSale.created_at >= start, ProductSale.created_at < end)

        total = (await self.db.execute(query)).scalar()
        return SalesSummaryResponse(
            branch_id=branch_id,
            year=year,
            month=month,
            total_revenue=sum_or_zero(total),
        )

    async def category_summary(self, branch_id: int) -> CategorySummaryResponse:
        """Revenue per category; every category is present."""
        result = await self.db.execute(
            select(ProductSale.category, func.sum(ProductSale.total_amount))
            .where(ProductSale.branch_id == branch_id)
            .group_by(ProductSale.category)
        )
        totals = dict(result.all())
        return CategorySummaryResponse(
            branch_id=branch_id,
            revenue_by_category={
                category.value: sum_or_zero(totals.get(category.value))
                for category in ProductCategory
            },
        )

    async def _fetch(self, query) -> list[ProductSale]:
        result = await self.db.execute(
            query.options(selectinload(ProductSale.branch), selectinload(ProductSale.student))
            .order_by(ProductSale.created_at.desc(), ProductSale.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _validate_student(self, student_id: int, branch_id: int) -> None:
        student = await self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", student_id)
        if student.branch_id != branch_id:
            raise ValidationError(
                f"Student {student_id} does not belong to branch {branch_id}",
                field="student_id",
            )

"""Schemas for Product Sales module."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from src.modules.product_sales.models import ProductCategory
from src.shared.schemas.base import BaseSchema


class ProductSaleCreate(BaseSchema):
    """Schema for recording a product sale."""

    product_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., gt=0)
    category: ProductCategory
    branch_id: int
    student_id: int | None = None


class ProductSaleUpdate(BaseSchema):
    """Schema for editing a product sale. The total is recomputed."""

    product_name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    quantity: int | None = Field(None, ge=1)
    unit_price: Decimal | None = Field(None, gt=0)
    category: ProductCategory | None = None
    student_id: int | None = None


class ProductSaleResponse(BaseSchema):
    """Schema for product sale response."""

    id: int
    product_name: str
    description: str | None
    quantity: int
    unit_price: Decimal
    total_amount: Decimal
    category: str
    branch_id: int
    branch_name: str | None
    student_id: int | None
    student_name: str | None
    created_at: datetime


class SalesSummaryResponse(BaseSchema):
    """Product revenue of a branch, for one month or all time."""

    branch_id: int
    year: int | None
    month: int | None
    total_revenue: Decimal


class CategorySummaryResponse(BaseSchema):
    """Product revenue of a branch per category."""

    branch_id: int
    revenue_by_category: dict[str, Decimal]

"""API endpoints for Product Sales module."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.access import BranchAccess
from src.core.database.session import get_db
from src.modules.product_sales.models import ProductCategory
from src.modules.product_sales.schemas import (
    CategorySummaryResponse,
    ProductSaleCreate,
    ProductSaleResponse,
    ProductSaleUpdate,
    SalesSummaryResponse,
)
from src.modules.product_sales.service import ProductSaleService
from src.modules.students.service import StudentService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/product-sales", tags=["Product Sales"])


def _responses(sales) -> list[ProductSaleResponse]:
    return [ProductSaleResponse.model_validate(s) for s in sales]


@router.post(
    "",
    response_model=ApiResponse[ProductSaleResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_sale(
    data: ProductSaleCreate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Record a product sale."""
    access.check(data.branch_id)
    sale = await ProductSaleService(db).create_sale(data)
    return ApiResponse(
        data=ProductSaleResponse.model_validate(sale),
        message="Product sale created successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[ProductSaleResponse]],
)
async def list_sales(
    access: BranchAccess,
    branch_id: int = Query(...),
    category: ProductCategory | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List product sales of a branch."""
    access.check(branch_id)
    sales = await ProductSaleService(db).list_sales(branch_id, category)
    return ApiResponse(data=_responses(sales))


@router.get(
    "/date-range",
    response_model=ApiResponse[list[ProductSaleResponse]],
)
async def list_sales_by_date_range(
    access: BranchAccess,
    branch_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Product sales recorded in a date range (inclusive)."""
    access.check(branch_id)
    sales = await ProductSaleService(db).list_sales_by_date_range(
        branch_id, start_date, end_date
    )
    return ApiResponse(data=_responses(sales))


@router.get(
    "/by-student/{student_id}",
    response_model=ApiResponse[list[ProductSaleResponse]],
)
async def list_sales_by_student(
    student_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Product sales bought by a student."""
    student = await StudentService(db).get_student_by_id(student_id, include_deleted=True)
    access.check(student.branch_id)
    sales = await ProductSaleService(db).list_sales_by_student(student_id)
    return ApiResponse(data=_responses(sales))


@router.get(
    "/summary",
    response_model=ApiResponse[SalesSummaryResponse],
)
async def get_sales_summary(
    access: BranchAccess,
    branch_id: int = Query(...),
    year: int | None = Query(None, ge=2000, le=2100),
    month: int | None = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Total product revenue, for a month or all time."""
    access.check(branch_id)
    return ApiResponse(data=await ProductSaleService(db).sales_summary(branch_id, year, month))


@router.get(
    "/summary/by-category",
    response_model=ApiResponse[CategorySummaryResponse],
)
async def get_category_summary(
    access: BranchAccess,
    branch_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Product revenue per category."""
    access.check(branch_id)
    return ApiResponse(data=await ProductSaleService(db).category_summary(branch_id))


@router.get(
    "/{sale_id}",
    response_model=ApiResponse[ProductSaleResponse],
)
async def get_sale(
    sale_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Get product sale by ID."""
    sale = await ProductSaleService(db).get_sale_by_id(sale_id)
    access.check(sale.branch_id)
    return ApiResponse(data=ProductSaleResponse.model_validate(sale))


@router.patch(
    "/{sale_id}",
    response_model=ApiResponse[ProductSaleResponse],
)
async def update_sale(
    sale_id: int,
    data: ProductSaleUpdate,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Edit a product sale."""
    service = ProductSaleService(db)
    sale = await service.get_sale_by_id(sale_id)
    access.check(sale.branch_id)
    sale = await service.update_sale(sale_id, data)
    return ApiResponse(
        data=ProductSaleResponse.model_validate(sale),
        message="Product sale updated successfully",
    )


@router.delete(
    "/{sale_id}",
    response_model=ApiResponse[None],
)
async def delete_sale(
    sale_id: int,
    access: BranchAccess,
    db: AsyncSession = Depends(get_db),
):
    """Delete a product sale."""
    service = ProductSaleService(db)
    sale = await service.get_sale_by_id(sale_id)
    access.check(sale.branch_id)
    await service.delete_sale(sale_id)
    return ApiResponse(data=None, message="Product sale deleted successfully")

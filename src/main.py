"""Tutoring centre back office FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from src.core.audit.router import router as audit_router
from src.core.config import settings
from src.core.exceptions import AppException
from src.core.exceptions.handlers import (
    app_exception_handler,
    http_exception_handler,
    sqlalchemy_db_error_handler,
    validation_exception_handler,
)
from src.modules.branches.router import router as branches_router
from src.modules.expenses.router import router as expenses_router
from src.modules.groups.router import router as groups_router
from src.modules.payments.router import router as payments_router
from src.modules.product_sales.router import router as product_sales_router
from src.modules.reports.router import router as reports_router
from src.modules.salaries.router import router as salaries_router
from src.modules.students.router import router as students_router
from src.modules.teachers.router import router as teachers_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting back office (env=%s)", settings.app_env)
    yield
    logger.info("Shutting down back office")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Tutoring Back Office",
        description="Students, groups, tuition payments, salaries and financial reports",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_db_error_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Routers
    app.include_router(branches_router, prefix="/api/v1")
    app.include_router(teachers_router, prefix="/api/v1")
    app.include_router(groups_router, prefix="/api/v1")
    app.include_router(students_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")
    app.include_router(salaries_router, prefix="/api/v1")
    app.include_router(product_sales_router, prefix="/api/v1")
    app.include_router(expenses_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")
    app.include_router(audit_router, prefix="/api/v1")

    return app


app = create_app()

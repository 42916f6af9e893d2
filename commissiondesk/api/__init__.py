"""API router aggregation."""

from fastapi import APIRouter

from commissiondesk.api.commissions import router as commissions_router
from commissiondesk.api.health import router as health_router
from commissiondesk.api.reports import router as reports_router
from commissiondesk.api.sales import router as sales_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(sales_router)
api_router.include_router(commissions_router)
api_router.include_router(reports_router)

__all__ = ["api_router"]

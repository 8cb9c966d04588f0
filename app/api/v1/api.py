from fastapi import APIRouter
from app.api.v1.endpoints import business, customers, dashboard, invoices, receipts, reports

api_router = APIRouter()

api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(receipts.router, prefix="/receipts", tags=["receipts"])
api_router.include_router(business.router, prefix="/settings/business", tags=["settings"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])

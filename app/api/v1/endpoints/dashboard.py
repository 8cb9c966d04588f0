from fastapi import APIRouter, Depends
from app.core.auth import AccountContext, get_current_account
from app.db.session import get_store
from app.db.store import DocumentStore
from app.schemas.dashboard import DashboardSummary
from app.services.dashboard_service import DashboardService

router = APIRouter()

@router.get("/", response_model=DashboardSummary)
async def get_dashboard(
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Last 30 days of sales, GST and income plus recent invoices"""
    return await DashboardService(store).summary(account.account_id)

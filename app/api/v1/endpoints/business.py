from fastapi import APIRouter, Depends
from app.core.auth import AccountContext, get_current_account
from app.db.session import get_store
from app.db.store import DocumentStore
from app.schemas.business import BusinessProfileUpdate, BusinessProfileResponse
from app.services.business_service import BusinessService

router = APIRouter()

@router.get("/", response_model=BusinessProfileResponse)
async def get_business_profile(
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Get the business profile (empty if never saved)"""
    return await BusinessService(store).get(account.account_id)

@router.put("/", response_model=BusinessProfileResponse)
async def save_business_profile(
    profile_in: BusinessProfileUpdate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Create or replace the business profile"""
    return await BusinessService(store).save(account.account_id, profile_in)

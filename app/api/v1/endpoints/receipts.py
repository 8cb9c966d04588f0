from typing import List
from fastapi import APIRouter, Depends
from app.core.auth import AccountContext, get_current_account
from app.db.session import get_store
from app.db.store import DocumentStore
from app.schemas.receipt import ReceiptCreate, ReceiptUpdate, ReceiptResponse
from app.services.receipt_service import ReceiptService

router = APIRouter()

@router.get("/", response_model=List[ReceiptResponse])
async def list_receipts(
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """List receipts by payment date, newest first"""
    return await ReceiptService(store).list_all(account.account_id)

@router.post("/", response_model=ReceiptResponse, status_code=201)
async def create_receipt(
    receipt_in: ReceiptCreate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Record a payment against an invoice"""
    return await ReceiptService(store).create(account.account_id, receipt_in)

@router.get("/{receipt_id}", response_model=ReceiptResponse)
async def get_receipt(
    receipt_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Get a receipt by ID"""
    return await ReceiptService(store).get(account.account_id, receipt_id)

@router.patch("/{receipt_id}", response_model=ReceiptResponse)
async def update_receipt(
    receipt_id: str,
    receipt_in: ReceiptUpdate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Update a receipt"""
    return await ReceiptService(store).update(account.account_id, receipt_id, receipt_in)

@router.delete("/{receipt_id}")
async def delete_receipt(
    receipt_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Delete a receipt"""
    await ReceiptService(store).delete(account.account_id, receipt_id)
    return {"message": "Receipt deleted successfully"}

from typing import List
from fastapi import APIRouter, Depends
from app.core.auth import AccountContext, get_current_account
from app.db.session import get_store
from app.db.store import DocumentStore
from app.schemas.invoice import InvoiceCreate, InvoiceUpdate, InvoiceResponse, NextNumberResponse
from app.schemas.receipt import OutstandingResponse
from app.services.invoice_service import InvoiceService
from app.services.ledger_service import LedgerService

router = APIRouter()

@router.get("/", response_model=List[InvoiceResponse])
async def list_invoices(
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """List invoices, newest first"""
    return await InvoiceService(store).list_all(account.account_id)

@router.get("/next-number", response_model=NextNumberResponse)
async def next_invoice_number(
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Preview the number the next invoice will most likely get"""
    number = await InvoiceService(store).next_number(account.account_id)
    return NextNumberResponse(invoice_number=number)

@router.post("/", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    invoice_in: InvoiceCreate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Create an invoice; totals and number are assigned by the server"""
    return await InvoiceService(store).create(account.account_id, invoice_in)

@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Get an invoice by ID"""
    return await InvoiceService(store).get(account.account_id, invoice_id)

@router.get("/{invoice_id}/outstanding", response_model=OutstandingResponse)
async def get_outstanding(
    invoice_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Pending balance of an invoice"""
    return await LedgerService(store).outstanding(account.account_id, invoice_id)

@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    invoice_in: InvoiceUpdate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Update an invoice"""
    return await InvoiceService(store).update(account.account_id, invoice_id, invoice_in)

@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Delete an invoice with no receipts"""
    await InvoiceService(store).delete(account.account_id, invoice_id)
    return {"message": "Invoice deleted successfully"}

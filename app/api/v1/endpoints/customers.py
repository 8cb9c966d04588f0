from typing import List
from fastapi import APIRouter, Depends
from app.core.auth import AccountContext, get_current_account
from app.db.session import get_store
from app.db.store import DocumentStore
from app.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from app.services.customer_service import CustomerService

router = APIRouter()

@router.get("/", response_model=List[CustomerResponse])
async def list_customers(
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """List customers sorted by party name"""
    return await CustomerService(store).list_all(account.account_id)

@router.post("/", response_model=CustomerResponse, status_code=201)
async def create_customer(
    customer_in: CustomerCreate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Create a new customer"""
    return await CustomerService(store).create(account.account_id, customer_in)

@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Get a customer by ID"""
    return await CustomerService(store).get(account.account_id, customer_id)

@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    customer_in: CustomerUpdate,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Update a customer"""
    return await CustomerService(store).update(account.account_id, customer_id, customer_in)

@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    account: AccountContext = Depends(get_current_account),
    store: DocumentStore = Depends(get_store)
):
    """Delete a customer with no invoices"""
    await CustomerService(store).delete(account.account_id, customer_id)
    return {"message": "Customer deleted successfully"}

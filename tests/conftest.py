import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.core.auth import AccountContext, get_current_account
from app.db.memory import InMemoryDocumentStore
from app.db.session import get_store
from app.main import app
from app.schemas.customer import CustomerCreate
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from factories import ACCOUNT_ID, make_invoice


@pytest.fixture
def account_id():
    return ACCOUNT_ID


@pytest.fixture
def store():
    """Fresh in-memory document store per test."""
    return InMemoryDocumentStore()


@pytest.fixture
def client(store):
    """TestClient bound to the in-memory store and a fixed account."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_current_account] = lambda: AccountContext(account_id=ACCOUNT_ID)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def mock_db():
    """Motor database double; each collection is a MagicMock with async methods."""
    collections = {}

    def get_collection(name):
        if name not in collections:
            collection = MagicMock()
            collection.find_one = AsyncMock(return_value=None)
            collection.insert_one = AsyncMock()
            collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
            collection.delete_one = AsyncMock()
            collection.replace_one = AsyncMock()
            collection.create_index = AsyncMock()
            collections[name] = collection
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = get_collection
    return db


@pytest_asyncio.fixture
async def customer(store):
    """A customer with a GSTIN."""
    return await CustomerRepository(store).create_customer(
        ACCOUNT_ID,
        CustomerCreate(party_name="Acme Traders", phone="9800000000", gst_number="29ABCDE1234F1Z5")
    )


@pytest_asyncio.fixture
async def invoice_1180(store, customer):
    """Invoice for 1000 + 18% GST = 1180."""
    invoice = make_invoice(customer.id, [{"name": "Widget", "quantity": 1, "price": 1000, "gst_percent": 18, "hsn_code": "8471"}])
    return await InvoiceRepository(store).create_invoice(invoice)


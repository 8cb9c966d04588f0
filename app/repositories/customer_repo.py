from typing import Dict, List, Optional

from app.db.store import CUSTOMERS, DocumentStore, collection_path
from app.models.base import utcnow_iso
from app.models.customer import Customer
from app.schemas.customer import CustomerCreate


class CustomerRepository:
    """Customer database operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _path(self, account_id: str) -> str:
        return collection_path(account_id, CUSTOMERS)

    async def create_customer(self, account_id: str, customer_data: CustomerCreate) -> Customer:
        """Create a new customer."""
        customer = Customer(
            account_id=account_id,
            party_name=customer_data.party_name.strip(),
            phone=customer_data.phone.strip(),
            gst_number=(customer_data.gst_number or "").strip().upper() or None,
            shipping_address=customer_data.shipping_address.strip()
        )
        customer.id = await self.store.create_document(self._path(account_id), customer.to_fields())
        return customer

    async def get_customer(self, account_id: str, customer_id: str) -> Optional[Customer]:
        """Get customer by ID."""
        doc = await self.store.get_document(self._path(account_id), customer_id)
        if doc:
            return Customer(**doc)
        return None

    async def list_customers(self, account_id: str) -> List[Customer]:
        """List customers sorted by party name."""
        docs = await self.store.query_documents(self._path(account_id))
        customers = [Customer(**doc) for doc in docs]
        customers.sort(key=lambda c: c.party_name.lower())
        return customers

    async def customers_by_id(self, account_id: str) -> Dict[str, Customer]:
        """Customer lookup used by reports and listings."""
        docs = await self.store.query_documents(self._path(account_id))
        return {doc["id"]: Customer(**doc) for doc in docs}

    async def update_customer(self, account_id: str, customer_id: str, update_data: dict) -> Optional[Customer]:
        """Merge changes into a customer."""
        if not await self.get_customer(account_id, customer_id):
            return None
        update_data["updated_at"] = utcnow_iso()
        await self.store.update_document(self._path(account_id), customer_id, update_data)
        return await self.get_customer(account_id, customer_id)

    async def delete_customer(self, account_id: str, customer_id: str) -> None:
        await self.store.delete_document(self._path(account_id), customer_id)

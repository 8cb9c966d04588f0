import logging
from typing import List

from app.core.errors import NotFoundError, ValidationError
from app.db.store import DocumentStore
from app.models.customer import Customer
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.schemas.customer import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:

    def __init__(self, store: DocumentStore):
        self.customers = CustomerRepository(store)
        self.invoices = InvoiceRepository(store)

    async def create(self, account_id: str, customer_in: CustomerCreate) -> Customer:
        if not customer_in.party_name.strip():
            raise ValidationError("Party name is required")
        customer = await self.customers.create_customer(account_id, customer_in)
        logger.info("Created customer %s", customer.party_name)
        return customer

    async def list_all(self, account_id: str) -> List[Customer]:
        return await self.customers.list_customers(account_id)

    async def get(self, account_id: str, customer_id: str) -> Customer:
        customer = await self.customers.get_customer(account_id, customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    async def update(self, account_id: str, customer_id: str, customer_in: CustomerUpdate) -> Customer:
        update_data = customer_in.model_dump(exclude_unset=True)
        if "party_name" in update_data:
            if not (update_data["party_name"] or "").strip():
                raise ValidationError("Party name is required")
            update_data["party_name"] = update_data["party_name"].strip()
        if "gst_number" in update_data:
            update_data["gst_number"] = (update_data["gst_number"] or "").strip().upper() or None

        customer = await self.customers.update_customer(account_id, customer_id, update_data)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    async def delete(self, account_id: str, customer_id: str) -> None:
        """Refuse to delete a customer that still has invoices."""
        customer = await self.get(account_id, customer_id)

        invoice_count = await self.invoices.count_for_customer(account_id, customer_id)
        if invoice_count > 0:
            raise ValidationError(
                f"Cannot delete {customer.party_name}: {invoice_count} invoice(s) are linked "
                "to this customer. Delete those invoices first."
            )

        await self.customers.delete_customer(account_id, customer_id)
        logger.info("Deleted customer %s", customer.party_name)

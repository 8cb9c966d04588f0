from typing import List, Optional

from app.core.errors import ValidationError
from app.db.store import INVOICES, DocumentStore, Filter, OrderBy, collection_path
from app.models.base import utcnow_iso
from app.models.invoice import Invoice, InvoiceStatus

# Fields owned by the numbering and ledger logic, never merged from callers
PROTECTED_FIELDS = ("status", "invoice_number", "account_id")


class InvoiceRepository:
    """Invoice database operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _path(self, account_id: str) -> str:
        return collection_path(account_id, INVOICES)

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """Insert a fully built invoice and return it with its id."""
        invoice.id = await self.store.create_document(self._path(invoice.account_id), invoice.to_fields())
        return invoice

    async def get_invoice(self, account_id: str, invoice_id: str) -> Optional[Invoice]:
        doc = await self.store.get_document(self._path(account_id), invoice_id)
        if doc:
            return Invoice(**doc)
        return None

    async def list_invoices(self, account_id: str) -> List[Invoice]:
        """All invoices, newest first."""
        docs = await self.store.query_documents(
            self._path(account_id),
            order_by=OrderBy("created_at", descending=True)
        )
        return [Invoice(**doc) for doc in docs]

    async def list_invoices_in_range(self, account_id: str, start: str, end: str) -> List[Invoice]:
        """Invoices with start <= created_at <= end, oldest first."""
        docs = await self.store.query_documents(
            self._path(account_id),
            filters=[
                Filter("created_at", ">=", start),
                Filter("created_at", "<=", end),
            ],
            order_by=OrderBy("created_at")
        )
        return [Invoice(**doc) for doc in docs]

    async def list_invoices_since(self, account_id: str, start: str) -> List[Invoice]:
        docs = await self.store.query_documents(
            self._path(account_id),
            filters=[Filter("created_at", ">=", start)]
        )
        return [Invoice(**doc) for doc in docs]

    async def count_for_customer(self, account_id: str, customer_id: str) -> int:
        docs = await self.store.query_documents(
            self._path(account_id),
            filters=[Filter("customer_id", "==", customer_id)]
        )
        return len(docs)

    async def update_invoice(self, account_id: str, invoice_id: str, update_data: dict) -> Optional[Invoice]:
        """Merge editable fields into an invoice."""
        protected = [field for field in PROTECTED_FIELDS if field in update_data]
        if protected:
            raise ValidationError(f"Fields cannot be edited directly: {', '.join(protected)}")
        if not await self.get_invoice(account_id, invoice_id):
            return None
        update_data["updated_at"] = utcnow_iso()
        await self.store.update_document(self._path(account_id), invoice_id, update_data)
        return await self.get_invoice(account_id, invoice_id)

    async def write_status(self, account_id: str, invoice_id: str, status: InvoiceStatus) -> None:
        """Persist a derived payment status. Only LedgerService calls this."""
        await self.store.update_document(
            self._path(account_id),
            invoice_id,
            {"status": status.value, "updated_at": utcnow_iso()}
        )

    async def delete_invoice(self, account_id: str, invoice_id: str) -> None:
        await self.store.delete_document(self._path(account_id), invoice_id)

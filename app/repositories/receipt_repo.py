from typing import List, Optional

from app.core.errors import ValidationError
from app.db.store import RECEIPTS, DocumentStore, Filter, OrderBy, collection_path
from app.models.base import utcnow_iso
from app.models.receipt import Receipt

PROTECTED_FIELDS = ("invoice_id", "receipt_number", "account_id")


class ReceiptRepository:
    """Receipt (payment) database operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _path(self, account_id: str) -> str:
        return collection_path(account_id, RECEIPTS)

    async def create_receipt(self, receipt: Receipt) -> Receipt:
        receipt.id = await self.store.create_document(self._path(receipt.account_id), receipt.to_fields())
        return receipt

    async def get_receipt(self, account_id: str, receipt_id: str) -> Optional[Receipt]:
        doc = await self.store.get_document(self._path(account_id), receipt_id)
        if doc:
            return Receipt(**doc)
        return None

    async def list_receipts(self, account_id: str) -> List[Receipt]:
        """All receipts by payment date, newest first."""
        docs = await self.store.query_documents(
            self._path(account_id),
            order_by=OrderBy("payment_date", descending=True)
        )
        return [Receipt(**doc) for doc in docs]

    async def list_for_invoice(self, account_id: str, invoice_id: str) -> List[Receipt]:
        docs = await self.store.query_documents(
            self._path(account_id),
            filters=[Filter("invoice_id", "==", invoice_id)]
        )
        return [Receipt(**doc) for doc in docs]

    async def list_receipts_since(self, account_id: str, start: str) -> List[Receipt]:
        docs = await self.store.query_documents(
            self._path(account_id),
            filters=[Filter("created_at", ">=", start)]
        )
        return [Receipt(**doc) for doc in docs]

    async def total_paid(self, account_id: str, invoice_id: str) -> float:
        """Sum of amount_received over every receipt linked to the invoice."""
        receipts = await self.list_for_invoice(account_id, invoice_id)
        return sum(receipt.amount_received or 0 for receipt in receipts)

    async def update_receipt(self, account_id: str, receipt_id: str, update_data: dict) -> Optional[Receipt]:
        protected = [field for field in PROTECTED_FIELDS if field in update_data]
        if protected:
            raise ValidationError(f"Fields cannot be edited: {', '.join(protected)}")
        if not await self.get_receipt(account_id, receipt_id):
            return None
        update_data["updated_at"] = utcnow_iso()
        await self.store.update_document(self._path(account_id), receipt_id, update_data)
        return await self.get_receipt(account_id, receipt_id)

    async def delete_receipt(self, account_id: str, receipt_id: str) -> None:
        await self.store.delete_document(self._path(account_id), receipt_id)

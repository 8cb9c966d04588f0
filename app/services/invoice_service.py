import logging
from typing import List, Optional

from app.core.errors import NotFoundError, ValidationError
from app.db.store import DocumentStore
from app.models.base import date_to_iso, utcnow_iso
from app.models.invoice import Invoice, LineItem
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.receipt_repo import ReceiptRepository
from app.schemas.invoice import InvoiceCreate, InvoiceResponse, InvoiceUpdate, LineItemBase
from app.services.ledger_service import LedgerService
from app.services.sequence_service import SequenceService
from app.utils.validation import calculate_totals, validate_line_items

logger = logging.getLogger(__name__)


def _to_line_items(items: List[LineItemBase]) -> List[LineItem]:
    return [
        LineItem(
            name=item.name.strip(),
            quantity=item.quantity,
            price=item.price,
            gst_percent=item.gst_percent,
            hsn_code=(item.hsn_code or "").strip() or None
        )
        for item in items
    ]


class InvoiceService:
    """Invoice lifecycle. Amounts are always computed here, never taken from the client."""

    def __init__(self, store: DocumentStore):
        self.invoices = InvoiceRepository(store)
        self.receipts = ReceiptRepository(store)
        self.customers = CustomerRepository(store)
        self.sequences = SequenceService(store)
        self.ledger = LedgerService(store)

    async def _require_customer(self, account_id: str, customer_id: str):
        customer = await self.customers.get_customer(account_id, customer_id)
        if not customer:
            raise ValidationError("Please select a valid customer.")
        return customer

    async def _to_response(self, account_id: str, invoice: Invoice, customer_name: Optional[str] = None) -> InvoiceResponse:
        if customer_name is None:
            customer = await self.customers.get_customer(account_id, invoice.customer_id)
            customer_name = customer.party_name if customer else None
        return InvoiceResponse(
            **invoice.model_dump(exclude={"account_id", "items"}),
            items=[LineItemBase(**item.model_dump()) for item in invoice.items],
            customer_name=customer_name
        )

    async def create(self, account_id: str, invoice_in: InvoiceCreate) -> InvoiceResponse:
        customer = await self._require_customer(account_id, invoice_in.customer_id)
        items = _to_line_items(invoice_in.items)
        validate_line_items(items)

        # Validation passed; only now consume a number
        invoice_number = await self.sequences.allocate(account_id, "invoices")
        created_at = date_to_iso(invoice_in.invoice_date) if invoice_in.invoice_date else utcnow_iso()

        invoice = Invoice(
            account_id=account_id,
            customer_id=invoice_in.customer_id,
            invoice_number=invoice_number,
            items=items,
            created_at=created_at,
            **calculate_totals(items)
        )
        invoice = await self.invoices.create_invoice(invoice)
        logger.info("Created invoice %s (total %.2f)", invoice.invoice_number, invoice.total)
        return await self._to_response(account_id, invoice, customer.party_name)

    async def list_all(self, account_id: str) -> List[InvoiceResponse]:
        invoices = await self.invoices.list_invoices(account_id)
        customers = await self.customers.customers_by_id(account_id)
        responses = []
        for invoice in invoices:
            customer = customers.get(invoice.customer_id)
            responses.append(await self._to_response(
                account_id, invoice, customer.party_name if customer else "Unknown"
            ))
        return responses

    async def get(self, account_id: str, invoice_id: str) -> InvoiceResponse:
        invoice = await self.invoices.get_invoice(account_id, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        return await self._to_response(account_id, invoice)

    async def next_number(self, account_id: str) -> str:
        return await self.sequences.peek(account_id, "invoices")

    async def update(self, account_id: str, invoice_id: str, invoice_in: InvoiceUpdate) -> InvoiceResponse:
        """
        Edit customer, items or date.

        Totals are recomputed from the new items and the payment status is
        reconciled afterwards, since a changed total can move the invoice
        between Paid and Partially Paid.
        """
        invoice = await self.invoices.get_invoice(account_id, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")

        update_data = {}
        if invoice_in.customer_id is not None:
            await self._require_customer(account_id, invoice_in.customer_id)
            update_data["customer_id"] = invoice_in.customer_id

        if invoice_in.items is not None:
            items = _to_line_items(invoice_in.items)
            validate_line_items(items)
            update_data["items"] = [item.model_dump() for item in items]
            update_data.update(calculate_totals(items))

        if invoice_in.invoice_date is not None:
            update_data["created_at"] = date_to_iso(invoice_in.invoice_date)

        if update_data:
            await self.invoices.update_invoice(account_id, invoice_id, update_data)
            await self.ledger.reconcile(account_id, invoice_id)
            logger.info("Updated invoice %s", invoice.invoice_number)

        return await self.get(account_id, invoice_id)

    async def delete(self, account_id: str, invoice_id: str) -> None:
        invoice = await self.invoices.get_invoice(account_id, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")

        receipts = await self.receipts.list_for_invoice(account_id, invoice_id)
        if receipts:
            raise ValidationError(
                f"Cannot delete invoice {invoice.invoice_number}: "
                f"{len(receipts)} receipt(s) are recorded against it. Delete them first."
            )

        await self.invoices.delete_invoice(account_id, invoice_id)
        logger.info("Deleted invoice %s", invoice.invoice_number)

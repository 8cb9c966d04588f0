import logging
from datetime import date
from typing import List, Optional

from app.core.errors import NotFoundError, ValidationError
from app.db.store import DocumentStore
from app.models.receipt import Receipt
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.receipt_repo import ReceiptRepository
from app.schemas.receipt import ReceiptCreate, ReceiptResponse, ReceiptUpdate
from app.services.ledger_service import LedgerService
from app.services.sequence_service import SequenceService
from app.utils.validation import validate_receipt_amount

logger = logging.getLogger(__name__)


class ReceiptService:
    """Payments against invoices. Every write is followed by a reconcile of the linked invoice."""

    def __init__(self, store: DocumentStore):
        self.receipts = ReceiptRepository(store)
        self.invoices = InvoiceRepository(store)
        self.customers = CustomerRepository(store)
        self.sequences = SequenceService(store)
        self.ledger = LedgerService(store)

    async def _to_response(
        self,
        account_id: str,
        receipt: Receipt,
        invoice_number: Optional[str] = None,
        customer_name: Optional[str] = None
    ) -> ReceiptResponse:
        if invoice_number is None:
            invoice = await self.invoices.get_invoice(account_id, receipt.invoice_id)
            if invoice:
                invoice_number = invoice.invoice_number
                customer = await self.customers.get_customer(account_id, invoice.customer_id)
                customer_name = customer.party_name if customer else None
        return ReceiptResponse(
            **receipt.model_dump(exclude={"account_id"}),
            invoice_number=invoice_number,
            customer_name=customer_name
        )

    async def create(self, account_id: str, receipt_in: ReceiptCreate) -> ReceiptResponse:
        if not receipt_in.invoice_id:
            raise ValidationError("Please select an invoice.")
        outstanding = await self.ledger.outstanding(account_id, receipt_in.invoice_id)
        validate_receipt_amount(receipt_in.amount_received, outstanding.balance)

        receipt_number = await self.sequences.allocate(account_id, "receipts")
        receipt = Receipt(
            account_id=account_id,
            invoice_id=receipt_in.invoice_id,
            receipt_number=receipt_number,
            amount_received=receipt_in.amount_received,
            payment_mode=receipt_in.payment_mode,
            payment_date=(receipt_in.payment_date or date.today()).isoformat()
        )
        receipt = await self.receipts.create_receipt(receipt)
        status = await self.ledger.reconcile(account_id, receipt.invoice_id)
        logger.info(
            "Recorded %s for %.2f against invoice %s (now %s)",
            receipt.receipt_number,
            receipt.amount_received,
            receipt.invoice_id,
            status.value if status else "missing"
        )
        return await self._to_response(account_id, receipt)

    async def list_all(self, account_id: str) -> List[ReceiptResponse]:
        receipts = await self.receipts.list_receipts(account_id)
        invoices = {invoice.id: invoice for invoice in await self.invoices.list_invoices(account_id)}
        customers = await self.customers.customers_by_id(account_id)

        responses = []
        for receipt in receipts:
            invoice = invoices.get(receipt.invoice_id)
            customer = customers.get(invoice.customer_id) if invoice else None
            responses.append(await self._to_response(
                account_id,
                receipt,
                invoice.invoice_number if invoice else "",
                customer.party_name if customer else "Unknown"
            ))
        return responses

    async def get(self, account_id: str, receipt_id: str) -> ReceiptResponse:
        receipt = await self.receipts.get_receipt(account_id, receipt_id)
        if not receipt:
            raise NotFoundError("Receipt not found")
        return await self._to_response(account_id, receipt)

    async def update(self, account_id: str, receipt_id: str, receipt_in: ReceiptUpdate) -> ReceiptResponse:
        receipt = await self.receipts.get_receipt(account_id, receipt_id)
        if not receipt:
            raise NotFoundError("Receipt not found")

        update_data = {}
        if receipt_in.amount_received is not None:
            validate_receipt_amount(receipt_in.amount_received)
            update_data["amount_received"] = receipt_in.amount_received
        if receipt_in.payment_mode is not None:
            update_data["payment_mode"] = receipt_in.payment_mode.value
        if receipt_in.payment_date is not None:
            update_data["payment_date"] = receipt_in.payment_date.isoformat()

        if update_data:
            await self.receipts.update_receipt(account_id, receipt_id, update_data)
            await self.ledger.reconcile(account_id, receipt.invoice_id)
            logger.info("Updated receipt %s", receipt.receipt_number)

        return await self.get(account_id, receipt_id)

    async def delete(self, account_id: str, receipt_id: str) -> None:
        receipt = await self.receipts.get_receipt(account_id, receipt_id)
        if not receipt:
            raise NotFoundError("Receipt not found")

        await self.receipts.delete_receipt(account_id, receipt_id)
        await self.ledger.reconcile(account_id, receipt.invoice_id)
        logger.info("Deleted receipt %s", receipt.receipt_number)

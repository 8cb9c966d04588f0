"""
LedgerService - invoice payment status reconciliation.

Core algorithm:
1. Load the invoice (missing invoice -> no-op, it may have been deleted)
2. Sum amount_received over ALL receipts linked to it
3. Derive Pending / Partially Paid / Paid from that sum and the invoice total
4. Write the status only if it changed

The status is always recomputed from scratch, never adjusted from the
previous value, so calling reconcile after any receipt create/update/delete,
or calling it twice, converges on the same answer.
"""

import logging
from typing import Optional

from app.core.errors import NotFoundError
from app.db.store import DocumentStore
from app.models.invoice import InvoiceStatus
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.receipt_repo import ReceiptRepository
from app.schemas.receipt import OutstandingResponse
from app.utils.validation import EPS, round2

logger = logging.getLogger(__name__)


def derive_status(total: float, total_paid: float) -> InvoiceStatus:
    """Payment status as a pure function of the invoice total and receipts."""
    if total_paid <= 0:
        return InvoiceStatus.PENDING
    if total_paid >= (total or 0) - EPS:
        return InvoiceStatus.PAID
    return InvoiceStatus.PARTIALLY_PAID


class LedgerService:

    def __init__(self, store: DocumentStore):
        self.invoices = InvoiceRepository(store)
        self.receipts = ReceiptRepository(store)

    async def reconcile(self, account_id: str, invoice_id: str) -> Optional[InvoiceStatus]:
        """
        Recompute and persist an invoice's payment status.

        Returns the derived status, or None if the invoice no longer exists.
        Store errors propagate so the caller never reports success over a
        stale status.
        """
        invoice = await self.invoices.get_invoice(account_id, invoice_id)
        if invoice is None:
            logger.info("Reconcile skipped, invoice %s not found", invoice_id)
            return None

        total_paid = await self.receipts.total_paid(account_id, invoice_id)
        new_status = derive_status(invoice.total, total_paid)

        if new_status != invoice.status:
            await self.invoices.write_status(account_id, invoice_id, new_status)
            logger.info(
                "Invoice %s status %s -> %s (paid %.2f of %.2f)",
                invoice.invoice_number or invoice_id,
                invoice.status.value,
                new_status.value,
                total_paid,
                invoice.total
            )
        return new_status

    async def outstanding(self, account_id: str, invoice_id: str) -> OutstandingResponse:
        """Pending balance of an invoice, used to prefill and cap new receipts."""
        invoice = await self.invoices.get_invoice(account_id, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")

        total_paid = await self.receipts.total_paid(account_id, invoice_id)
        return OutstandingResponse(
            invoice_id=invoice_id,
            total=round2(invoice.total),
            total_paid=round2(total_paid),
            balance=round2(invoice.total - total_paid),
            status=derive_status(invoice.total, total_paid)
        )

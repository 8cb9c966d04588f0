from datetime import datetime, timedelta, timezone

from app.db.store import DocumentStore
from app.models.base import to_iso
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.receipt_repo import ReceiptRepository
from app.schemas.dashboard import DashboardSummary, RecentInvoice
from app.utils.validation import round2

WINDOW_DAYS = 30
RECENT_LIMIT = 5


class DashboardService:

    def __init__(self, store: DocumentStore):
        self.invoices = InvoiceRepository(store)
        self.receipts = ReceiptRepository(store)
        self.customers = CustomerRepository(store)

    async def summary(self, account_id: str, now: datetime = None) -> DashboardSummary:
        """Sales, GST, income and net (income minus GST) for the trailing window."""
        now = now or datetime.now(timezone.utc)
        since = to_iso(now - timedelta(days=WINDOW_DAYS))

        invoices = await self.invoices.list_invoices_since(account_id, since)
        receipts = await self.receipts.list_receipts_since(account_id, since)

        total_sales = sum(invoice.total or 0 for invoice in invoices)
        total_gst = sum(invoice.gst_amount or 0 for invoice in invoices)
        total_income = sum(receipt.amount_received or 0 for receipt in receipts)

        customers = await self.customers.customers_by_id(account_id)
        recent = []
        for invoice in (await self.invoices.list_invoices(account_id))[:RECENT_LIMIT]:
            customer = customers.get(invoice.customer_id)
            recent.append(RecentInvoice(
                id=invoice.id,
                invoice_number=invoice.invoice_number,
                customer_name=customer.party_name if customer else "Unknown",
                total=round2(invoice.total),
                status=invoice.status.value,
                created_at=invoice.created_at
            ))

        return DashboardSummary(
            window_days=WINDOW_DAYS,
            total_sales=round2(total_sales),
            total_gst=round2(total_gst),
            total_income=round2(total_income),
            net_profit=round2(total_income - total_gst),
            recent_invoices=recent
        )

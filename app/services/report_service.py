import logging

from app.db.store import DocumentStore
from app.models.base import utcnow_iso
from app.repositories.business_repo import BusinessRepository
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.schemas.report import BusinessMeta, GstReport
from app.services.compliance_service import ComplianceService
from app.services.tax_service import TaxService, period_bounds, period_label, state_name

logger = logging.getLogger(__name__)


class ReportService:
    """Fetches a period's data and runs aggregation and compliance checks over it."""

    def __init__(self, store: DocumentStore):
        self.invoices = InvoiceRepository(store)
        self.customers = CustomerRepository(store)
        self.business = BusinessRepository(store)
        self.tax = TaxService()
        self.compliance = ComplianceService()

    async def gstr3b(self, account_id: str, fy_month_index: int, fy_start_year: int) -> GstReport:
        start, end = period_bounds(fy_month_index, fy_start_year)
        label = period_label(fy_month_index, fy_start_year)
        logger.info("Generating GSTR-3B for %s (%s → %s)", label, start, end)

        invoices = await self.invoices.list_invoices_in_range(account_id, start, end)
        customers_by_id = await self.customers.customers_by_id(account_id)
        profile = await self.business.get_profile(account_id)

        summary = self.tax.aggregate(invoices, customers_by_id, profile)
        warnings = self.compliance.check(invoices, customers_by_id, profile)

        logger.info("GSTR-3B %s: %s invoice(s), %s warning(s)", label, len(invoices), len(warnings))
        return GstReport(
            fy_month_index=fy_month_index,
            fy_start_year=fy_start_year,
            period_label=label,
            period_start=start,
            period_end=end,
            business=BusinessMeta(
                business_name=profile.business_name or "Business",
                gstin=profile.gstin or "N/A",
                state_name=state_name(profile.gstin),
            ),
            summary=summary,
            customer_rollup=self.tax.customer_rollup(summary.rows),
            warnings=warnings,
            badge=self.compliance.badge(warnings, profile),
            invoice_count=len(invoices),
            generated_at=utcnow_iso(),
        )

from typing import Dict, List

from app.models.business import BusinessProfile
from app.models.customer import Customer
from app.models.invoice import Invoice
from app.schemas.report import ComplianceBadge, ComplianceWarning


class ComplianceService:
    """Flags data gaps that block GST filing. Every rule is checked independently."""

    def check(
        self,
        invoices: List[Invoice],
        customers_by_id: Dict[str, Customer],
        business_profile: BusinessProfile
    ) -> List[ComplianceWarning]:
        warnings: List[ComplianceWarning] = []

        if not business_profile.gstin:
            warnings.append(ComplianceWarning(
                type="error",
                msg="Business GSTIN not configured. Go to Settings → Business Profile to add it."
            ))

        missing_customer_gstin = 0
        missing_hsn = 0
        for invoice in invoices:
            customer = customers_by_id.get(invoice.customer_id)
            if customer is None or not customer.gstin:
                missing_customer_gstin += 1
            if not any(item.has_hsn() for item in invoice.items):
                missing_hsn += 1

        if missing_customer_gstin > 0:
            warnings.append(ComplianceWarning(
                type="warn",
                msg=f"{missing_customer_gstin} invoice(s) linked to customers without a GSTIN. "
                    "These are treated as intra-state B2C supplies."
            ))

        if missing_hsn > 0:
            warnings.append(ComplianceWarning(
                type="warn",
                msg=f"{missing_hsn} invoice(s) have items without HSN/SAC codes. "
                    "These are required for GSTR-1 HSN summary."
            ))

        if not invoices:
            warnings.append(ComplianceWarning(
                type="warn",
                msg="No invoices found for this period. Verify the selected month and year."
            ))

        if not warnings and invoices:
            warnings.append(ComplianceWarning(
                type="ok",
                msg=f"All {len(invoices)} invoice(s) have complete GST data. Ready to file."
            ))

        return warnings

    @staticmethod
    def badge(warnings: List[ComplianceWarning], business_profile: BusinessProfile) -> ComplianceBadge:
        """Collapse warnings into the single status shown next to the report."""
        if not business_profile.gstin:
            return ComplianceBadge(status="missing", label="Business GSTIN not configured")

        types = {warning.type for warning in warnings}
        if "error" in types:
            return ComplianceBadge(status="missing", label="Missing Critical Data")
        if "warn" in types:
            return ComplianceBadge(status="review", label="Review Required Before Filing")
        if "ok" in types:
            return ComplianceBadge(status="ready", label="Ready to File")
        return ComplianceBadge(status="review", label=f"GSTIN: {business_profile.gstin}")

"""
GST report schemas.

Shapes follow GSTR-3B Section 3.1: outward supplies split into intra-state
(CGST + SGST), inter-state (IGST) and zero/nil/exempt buckets.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel


class TaxBucket(BaseModel):
    taxable_value: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0
    count: int = 0


class TaxTotals(BaseModel):
    taxable_value: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0
    total_tax: float = 0.0


class InvoiceTaxRow(BaseModel):
    """Invoice-level tax liability line."""
    invoice_number: str
    customer_name: str
    customer_gstin: str
    date: str
    status: str
    supply_type: Literal["intra", "inter"] = "intra"
    taxable_value: float
    cgst: float
    sgst: float
    igst: float = 0.0
    total_gst: float
    gross_total: float
    hsn_summary: str


class CustomerRollup(BaseModel):
    """Outward supplies grouped by customer GSTIN."""
    name: str
    gstin: str
    invoice_count: int = 0
    taxable_value: float = 0.0
    igst: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    total_gst: float = 0.0


class Gstr3bSummary(BaseModel):
    intra: TaxBucket
    inter: TaxBucket
    exempt: TaxBucket
    totals: TaxTotals
    rows: List[InvoiceTaxRow] = []


class ComplianceWarning(BaseModel):
    type: Literal["error", "warn", "ok"]
    msg: str


class ComplianceBadge(BaseModel):
    status: Literal["missing", "review", "ready"]
    label: str


class BusinessMeta(BaseModel):
    business_name: str
    gstin: str
    state_name: str


class GstReport(BaseModel):
    """Everything the GSTR-3B view and the spreadsheet export need."""
    fy_month_index: int
    fy_start_year: int
    period_label: str
    period_start: str
    period_end: str
    business: BusinessMeta
    summary: Gstr3bSummary
    customer_rollup: List[CustomerRollup]
    warnings: List[ComplianceWarning]
    badge: ComplianceBadge
    invoice_count: int
    generated_at: Optional[str] = None

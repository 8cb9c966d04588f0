"""
TaxService - GSTR-3B aggregation over a period's invoices.

Every non-exempt invoice is treated as an intra-state supply and its GST is
split into CGST + SGST. ``get_supply_type`` can classify invoices by GSTIN
state codes, but bucketing does not use it yet: IGST reporting is future
work, so the inter-state bucket is always empty.
"""

import calendar
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.errors import ValidationError
from app.models.business import BusinessProfile
from app.models.customer import Customer
from app.models.invoice import Invoice, InvoiceStatus, LineItem
from app.schemas.report import CustomerRollup, Gstr3bSummary, InvoiceTaxRow, TaxBucket, TaxTotals
from app.utils.validation import round2

logger = logging.getLogger(__name__)

# Indian state code -> name (first two digits of a GSTIN)
STATE_CODES = {
    "01": "Jammu & Kashmir", "02": "Himachal Pradesh", "03": "Punjab",
    "04": "Chandigarh", "05": "Uttarakhand", "06": "Haryana",
    "07": "Delhi", "08": "Rajasthan", "09": "Uttar Pradesh",
    "10": "Bihar", "11": "Sikkim", "12": "Arunachal Pradesh",
    "13": "Nagaland", "14": "Manipur", "15": "Mizoram",
    "16": "Tripura", "17": "Meghalaya", "18": "Assam",
    "19": "West Bengal", "20": "Jharkhand", "21": "Odisha",
    "22": "Chhattisgarh", "23": "Madhya Pradesh", "24": "Gujarat",
    "26": "Dadra & NH / Daman & Diu", "27": "Maharashtra",
    "29": "Karnataka", "30": "Goa", "31": "Lakshadweep",
    "32": "Kerala", "33": "Tamil Nadu", "34": "Puducherry",
    "35": "Andaman & Nicobar", "36": "Telangana", "37": "Andhra Pradesh",
}

# Financial year runs April-March; month index 1 = April ... 12 = March
FY_MONTH_MAP = [4, 5, 6, 7, 8, 9, 10, 11, 12, 1, 2, 3]
FY_MONTH_NAMES = [
    "April", "May", "June", "July", "August", "September",
    "October", "November", "December", "January", "February", "March",
]


def get_state_code(gstin: Optional[str]) -> Optional[str]:
    if not gstin or len(gstin.strip()) < 2:
        return None
    return gstin.strip()[:2].upper()


def state_name(gstin: Optional[str]) -> str:
    return STATE_CODES.get(get_state_code(gstin), "Unknown State")


def get_supply_type(business_gstin: Optional[str], customer_gstin: Optional[str]) -> str:
    """'intra' (CGST+SGST) or 'inter' (IGST); 'intra' when either GSTIN is missing."""
    business_state = get_state_code(business_gstin)
    customer_state = get_state_code(customer_gstin)
    if not business_state or not customer_state:
        return "intra"
    return "intra" if business_state == customer_state else "inter"


def _check_fy_month(fy_month_index: int) -> None:
    if not 1 <= fy_month_index <= 12:
        raise ValidationError(f"Financial year month must be 1-12, got {fy_month_index}")


def fy_to_calendar(fy_month_index: int, fy_start_year: int) -> Tuple[int, int]:
    """Map (FY month index, FY start year) to (calendar month, calendar year)."""
    _check_fy_month(fy_month_index)
    cal_month = FY_MONTH_MAP[fy_month_index - 1]
    # Jan-Mar belong to the next calendar year
    cal_year = fy_start_year if cal_month >= 4 else fy_start_year + 1
    return cal_month, cal_year


def period_bounds(fy_month_index: int, fy_start_year: int) -> Tuple[str, str]:
    """Inclusive [first day 00:00:00, last day 23:59:59] of the period, as stored timestamps."""
    cal_month, cal_year = fy_to_calendar(fy_month_index, fy_start_year)
    last_day = calendar.monthrange(cal_year, cal_month)[1]
    start = f"{cal_year:04d}-{cal_month:02d}-01T00:00:00Z"
    end = f"{cal_year:04d}-{cal_month:02d}-{last_day:02d}T23:59:59Z"
    return start, end


def period_label(fy_month_index: int, fy_start_year: int) -> str:
    _check_fy_month(fy_month_index)
    return f"{FY_MONTH_NAMES[fy_month_index - 1]} {fy_start_year}–{fy_start_year + 1}"


def compute_tax_split(invoice: Invoice) -> Tuple[float, float]:
    """
    CGST/SGST for an invoice.

    Stored values win when both are present. Older invoices only carry
    gst_amount, which is halved with each half rounded independently; this
    can drift a paisa from the rounded total and is accepted as is.
    """
    if invoice.cgst_amount is not None and invoice.sgst_amount is not None:
        return float(invoice.cgst_amount or 0), float(invoice.sgst_amount or 0)
    amount = float(invoice.gst_amount or 0)
    return round2(amount / 2), round2(amount / 2)


def build_hsn_summary(items: Iterable[LineItem]) -> str:
    codes: List[str] = []
    for item in items:
        if item.hsn_code and item.hsn_code not in codes:
            codes.append(item.hsn_code)
    return ", ".join(codes) or "N/A"


class TaxService:
    """Stateless; all inputs are passed per call."""

    def aggregate(
        self,
        invoices: List[Invoice],
        customers_by_id: Dict[str, Customer],
        business_profile: BusinessProfile
    ) -> Gstr3bSummary:
        intra = TaxBucket()
        inter = TaxBucket()
        exempt = TaxBucket()
        rows: List[InvoiceTaxRow] = []

        for invoice in invoices:
            taxable_value = round2(invoice.subtotal)
            gst_amt = round2(invoice.gst_amount)
            cgst, sgst = compute_tax_split(invoice)

            if gst_amt == 0:
                exempt.taxable_value += taxable_value
                exempt.count += 1
            else:
                intra.taxable_value += taxable_value
                intra.cgst += cgst
                intra.sgst += sgst
                intra.count += 1

            customer = customers_by_id.get(invoice.customer_id)
            rows.append(InvoiceTaxRow(
                invoice_number=invoice.invoice_number or "",
                customer_name=customer.party_name if customer and customer.party_name else "Unknown",
                customer_gstin=customer.gstin if customer and customer.gstin else "N/A",
                date=(invoice.created_at or "")[:10],
                status=(invoice.status or InvoiceStatus.PENDING).value,
                supply_type="intra",
                taxable_value=taxable_value,
                cgst=cgst,
                sgst=sgst,
                igst=0.0,
                total_gst=gst_amt,
                gross_total=round2(invoice.total),
                hsn_summary=build_hsn_summary(invoice.items),
            ))

        # Round once per bucket, not per line
        for bucket in (intra, inter, exempt):
            bucket.taxable_value = round2(bucket.taxable_value)
            bucket.cgst = round2(bucket.cgst)
            bucket.sgst = round2(bucket.sgst)
            bucket.igst = round2(bucket.igst)

        totals = TaxTotals(
            taxable_value=round2(intra.taxable_value + inter.taxable_value + exempt.taxable_value),
            cgst=intra.cgst,
            sgst=intra.sgst,
            igst=inter.igst,
            total_tax=round2(intra.cgst + intra.sgst + inter.igst),
        )

        logger.debug(
            "Aggregated %s invoices for %s: taxable %.2f, tax %.2f",
            len(invoices),
            business_profile.business_name or "business",
            totals.taxable_value,
            totals.total_tax
        )
        return Gstr3bSummary(intra=intra, inter=inter, exempt=exempt, totals=totals, rows=rows)

    @staticmethod
    def customer_rollup(rows: List[InvoiceTaxRow]) -> List[CustomerRollup]:
        """Group detail rows by customer GSTIN (insertion order preserved)."""
        grouped: Dict[str, CustomerRollup] = {}
        for row in rows:
            entry = grouped.get(row.customer_gstin)
            if entry is None:
                entry = CustomerRollup(name=row.customer_name, gstin=row.customer_gstin)
                grouped[row.customer_gstin] = entry
            entry.taxable_value += row.taxable_value
            entry.igst += row.igst
            entry.cgst += row.cgst
            entry.sgst += row.sgst
            entry.total_gst += row.total_gst
            entry.invoice_count += 1

        for entry in grouped.values():
            entry.taxable_value = round2(entry.taxable_value)
            entry.igst = round2(entry.igst)
            entry.cgst = round2(entry.cgst)
            entry.sgst = round2(entry.sgst)
            entry.total_gst = round2(entry.total_gst)
        return list(grouped.values())

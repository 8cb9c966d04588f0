"""
ExportService - GSTR-3B / GSTR-2A spreadsheet generation.

Every number written here is copied from a GstReport built by ReportService;
nothing is recomputed, so the workbook always agrees with the on-screen report.
"""

import re
from io import BytesIO
from typing import List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from app.schemas.report import GstReport
from app.services.tax_service import FY_MONTH_NAMES

BOLD_FONT = Font(bold=True)
TITLE_FONT = Font(bold=True, size=14)

DISCLAIMER = "⚠ This is a system-generated summary. Verify with your CA before filing on gstin.gov.in"

TAX_LIABILITY_HEADER = [
    "Invoice #", "Date", "Customer Name", "Customer GSTIN",
    "Supply Type", "Status", "Taxable Value (₹)",
    "IGST (₹)", "CGST (₹)", "SGST (₹)", "Total GST (₹)",
    "Gross Total (₹)", "HSN/SAC Codes",
]

OUTWARD_SUPPLIES_HEADER = [
    "Customer Name", "Customer GSTIN", "Invoice Count", "Taxable Value (₹)",
    "IGST (₹)", "CGST (₹)", "SGST (₹)", "Total GST (₹)",
]

PURCHASE_REGISTER_HEADER = [
    "Invoice Date", "Supplier Name", "Supplier GSTIN", "Invoice Number",
    "Taxable Value (₹)", "IGST (₹)", "CGST (₹)", "SGST/UTGST (₹)",
    "Total Amount (₹)", "ITC Eligible (Y/N)", "HSN/SAC", "Notes",
]


def _safe_business_name(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9 ]", "", name or "Business") or "Business"


def export_filename(business_name: str, kind: str, fy_month_index: int, fy_start_year: int) -> str:
    """e.g. Acme_Traders_GSTR3B_April_2024.xlsx"""
    safe_name = re.sub(r"\s+", "_", _safe_business_name(business_name))
    return f"{safe_name}_{kind}_{FY_MONTH_NAMES[fy_month_index - 1]}_{fy_start_year}.xlsx"


def _write_rows(ws: Worksheet, rows: Sequence[Sequence], widths: Sequence[int]) -> None:
    for row in rows:
        ws.append(list(row))
    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width


def _bold_row(ws: Worksheet, row_number: int) -> None:
    for cell in ws[row_number]:
        cell.font = BOLD_FONT


def _to_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class ExportService:

    def build_gstr3b_workbook(self, report: GstReport) -> bytes:
        wb = Workbook()
        self._summary_sheet(wb.active, report)
        self._tax_liability_sheet(wb.create_sheet("Tax Liability"), report)
        self._outward_supplies_sheet(wb.create_sheet("Outward Supplies"), report)
        self._disclaimer_sheet(wb.create_sheet("Disclaimer"), report)
        return _to_bytes(wb)

    def build_gstr2a_workbook(self, report: GstReport) -> bytes:
        """ITC template; purchase data is entered by the user, so every figure starts at zero."""
        wb = Workbook()
        business = report.business

        ws1 = wb.active
        ws1.title = "ITC Summary"
        _write_rows(ws1, [
            ["GSTR-2A / ITC SUMMARY TEMPLATE"],
            [f"Business: {_safe_business_name(business.business_name)}  |  "
             f"GSTIN: {business.gstin}  |  Period: {report.period_label}"],
            [],
            ["ℹ NOTE: GSTR-2A is auto-drafted by the GST portal from your suppliers' GSTR-1 filings."],
            ["This template helps you track and reconcile ITC claims from your purchase data."],
            [],
            ["ITC ELIGIBLE — OVERVIEW"],
            [],
            ["ITC Head", "ITC Available (₹)", "ITC Claimed (₹)", "ITC Balance (₹)", "Notes"],
            ["IGST", 0, 0, 0, "Enter from purchase invoices"],
            ["CGST", 0, 0, 0, "Enter from purchase invoices"],
            ["SGST/UTGST", 0, 0, 0, "Enter from purchase invoices"],
            ["CESS", 0, 0, 0, ""],
            ["TOTAL ITC", 0, 0, 0, "Net of all heads"],
            [],
            ['⚠ A "Purchases" module is required to auto-populate ITC figures. '
             "Contact your CA for manual entries."],
        ], [20, 18, 16, 16, 40])
        ws1["A1"].font = TITLE_FONT
        _bold_row(ws1, 9)

        ws2 = wb.create_sheet("Purchase Register")
        blank_row = ["", "", "", "", "", "", "", "", "", "Y", "", ""]
        _write_rows(ws2, [
            ["PURCHASE REGISTER — DATA ENTRY TEMPLATE"],
            ["Fill this sheet with your purchase invoices to enable ITC reconciliation."],
            [],
            PURCHASE_REGISTER_HEADER,
            *[blank_row for _ in range(20)],
        ], [13, 28, 18, 16, 16, 12, 12, 14, 14, 14, 12, 20])
        ws2["A1"].font = TITLE_FONT
        _bold_row(ws2, 4)

        ws3 = wb.create_sheet("Reconciliation Guide")
        _write_rows(ws3, [
            ["ITC RECONCILIATION FRAMEWORK"],
            [],
            ["Step", "Action", "Source", "Status"],
            ["1", "Download GSTR-2A from GST portal", "gstin.gov.in → Returns → GSTR-2B", "☐ Pending"],
            ["2", "Fill Purchase Register in this file", "Your purchase invoices", "☐ Pending"],
            ["3", "Match GSTR-2A entries with Purchase Register", "Both above", "☐ Pending"],
            ["4", "Identify mismatches (supplier not filed GSTR-1)", "Comparison result", "☐ Pending"],
            ["5", "Claim only matched ITC in GSTR-3B Table 4", "After reconciliation", "☐ Pending"],
            [],
            ["RECONCILIATION RULES (Per GST Law)"],
            [],
            ["Rule", "Description"],
            ["Sec 16(2)(a)", "Tax invoice / Debit Note must exist in buyer's records"],
            ["Sec 16(2)(b)", "Supplier must have filed GSTR-1 (visible in GSTR-2A/2B)"],
            ["Sec 16(2)(c)", "Tax must have been paid to Government by supplier"],
            ["Sec 16(2)(d)", "Goods/services received"],
            ["Rule 36(4)", "Provisional ITC limited to 5% of eligible credit (currently 0% — only 2B ITC allowed)"],
            [],
            ["⚠ Consult your CA before claiming ITC."],
        ], [8, 55, 40, 14])
        ws3["A1"].font = TITLE_FONT
        _bold_row(ws3, 3)
        _bold_row(ws3, 12)

        return _to_bytes(wb)

    def _summary_sheet(self, ws: Worksheet, report: GstReport) -> None:
        ws.title = "3B Summary"
        business = report.business
        summary = report.summary
        totals = summary.totals

        _write_rows(ws, [
            ["GSTR-3B RETURN SUMMARY"],
            [f"Business Name: {_safe_business_name(business.business_name)}"],
            [f"GSTIN: {business.gstin}"],
            [f"State: {business.state_name}"],
            [f"Period: {report.period_label}"],
            [f"Generated On: {report.generated_at or ''}"],
            [],
            ["Section 3.1 – Details of Outward Supplies and Intra/Inter-state Supplies"],
            [],
            ["Nature of Supplies", "Taxable Value (₹)", "IGST (₹)", "CGST (₹)", "SGST/UTGST (₹)", "Cess (₹)"],
            ["Outward Taxable (Intra-state)", summary.intra.taxable_value, 0, summary.intra.cgst, summary.intra.sgst, 0],
            ["Outward Taxable (Inter-state)", summary.inter.taxable_value, summary.inter.igst, 0, 0, 0],
            ["Zero/Nil/Exempt Supplies", summary.exempt.taxable_value, 0, 0, 0, 0],
            ["TOTAL", totals.taxable_value, totals.igst, totals.cgst, totals.sgst, 0],
            [],
            ["Section 6 – Payment of Tax"],
            [],
            ["Tax Head", "Total Liability (₹)", "ITC Available (₹)", "Net Payable (₹)"],
            ["IGST", totals.igst, 0, totals.igst],
            ["CGST", totals.cgst, 0, totals.cgst],
            ["SGST/UTGST", totals.sgst, 0, totals.sgst],
            ["CESS", 0, 0, 0],
            ["TOTAL TAX PAYABLE", totals.total_tax, 0, totals.total_tax],
            [],
            [DISCLAIMER],
        ], [42, 18, 14, 14, 18, 10])
        ws["A1"].font = TITLE_FONT
        for row_number in (8, 10, 14, 16, 18, 23):
            _bold_row(ws, row_number)

    def _tax_liability_sheet(self, ws: Worksheet, report: GstReport) -> None:
        rows: List[list] = [TAX_LIABILITY_HEADER]
        for row in report.summary.rows:
            rows.append([
                row.invoice_number, row.date, row.customer_name, row.customer_gstin,
                "Intra-state" if row.supply_type == "intra" else "Inter-state",
                row.status, row.taxable_value,
                row.igst, row.cgst, row.sgst, row.total_gst,
                row.gross_total, row.hsn_summary,
            ])
        _write_rows(ws, rows, [14, 12, 28, 18, 14, 14, 18, 12, 12, 12, 14, 16, 16])
        _bold_row(ws, 1)

    def _outward_supplies_sheet(self, ws: Worksheet, report: GstReport) -> None:
        rows: List[list] = [OUTWARD_SUPPLIES_HEADER]
        for entry in report.customer_rollup:
            rows.append([
                entry.name, entry.gstin, entry.invoice_count,
                entry.taxable_value, entry.igst, entry.cgst, entry.sgst, entry.total_gst,
            ])
        _write_rows(ws, rows, [30, 18, 14, 18, 12, 12, 12, 14])
        _bold_row(ws, 1)

    def _disclaimer_sheet(self, ws: Worksheet, report: GstReport) -> None:
        _write_rows(ws, [
            ["COMPLIANCE DISCLAIMER"],
            [],
            ["This report has been auto-generated by Tax Road from your billing data."],
            ["It is provided for reference purposes only and is NOT a substitute for professional tax advice."],
            [],
            ["Before Filing:"],
            ["1. Verify all figures with your Chartered Accountant (CA) or Tax Professional."],
            ["2. Cross-check with your GSTR-1 (outward supplies) already filed."],
            ["3. Validate Input Tax Credit (ITC) eligibility."],
            ["4. Log in to the GST Portal (gstin.gov.in) to file your actual GSTR-3B."],
            [],
            ["Tax Road is not responsible for any incorrect filings based on this report."],
            [],
            [f"Generated: {report.generated_at or ''}"],
            ["Software: Tax Road — Smart Billing for Indian Businesses"],
        ], [90])
        ws["A1"].font = TITLE_FONT

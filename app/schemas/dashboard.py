from typing import List
from pydantic import BaseModel


class RecentInvoice(BaseModel):
    id: str
    invoice_number: str
    customer_name: str
    total: float
    status: str
    created_at: str


class DashboardSummary(BaseModel):
    """Rolling totals over the last ``window_days`` days."""
    window_days: int
    total_sales: float
    total_gst: float
    total_income: float
    net_profit: float
    recent_invoices: List[RecentInvoice] = []
